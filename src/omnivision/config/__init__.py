from .settings import OmniVisionConfig, create_example_env_file, load_config, setup_logging

__all__ = ["OmniVisionConfig", "create_example_env_file", "load_config", "setup_logging"]
