from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "RESMON_"}

    # Probe executable
    probe_name: str = "resource_monitor"
    probe_remote_name: str = "cctools-monitor"
    probe_env_var: str = "RESOURCE_MONITOR"  # explicit probe path, checked before PATH

    # Log file naming ("%%" is replaced by the node id)
    default_log_format: str = "resource-rule-%%"

    # Exit status the probe uses when a limit was exceeded
    overflow_exit_code: int = 147

    # Launcher scripts
    wrapper_dir: str = "."
    wrapper_prefix: str = "resource_monitor"

    # Logging
    log_level: str = "INFO"
    debug: bool = False
