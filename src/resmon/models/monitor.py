import os

from pydantic import BaseModel, Field, computed_field


class MonitorConfig(BaseModel):
    """Resource monitor options, fixed for the lifetime of the hook."""

    model_config = {"frozen": True}

    log_dir: str = Field(min_length=1)
    log_format: str = "resource-rule-%%"
    interval: int = Field(default=1, ge=1)  # seconds between probe samples
    enable_debug: bool = False
    enable_time_series: bool = False
    enable_list_files: bool = False
    probe_executable: str
    probe_remote_name: str = "cctools-monitor"

    @computed_field
    @property
    def log_prefix_template(self) -> str:
        return os.path.join(self.log_dir, self.log_format)
