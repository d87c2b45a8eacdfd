"""OmniVision - Entry point for the TUI screen assistant."""

import argparse
from pathlib import Path

from omnivision.config.settings import create_example_env_file, load_config, setup_logging


def check_system_status() -> dict:
    import mss
    import sounddevice as sd

    status = {}
    try:
        status["input device"] = sd.query_devices(kind="input")["name"]
        status["output device"] = sd.query_devices(kind="output")["name"]
    except Exception as e:
        status["audio"] = f"unavailable ({e})"
    try:
        with mss.mss() as sct:
            for index, monitor in enumerate(sct.monitors):
                status[f"monitor {index}"] = f"{monitor['width']}x{monitor['height']}"
    except Exception as e:
        status["screen"] = f"unavailable ({e})"
    return status


def main():
    parser = argparse.ArgumentParser(description="OmniVision live screen assistant")
    parser.add_argument("--config", type=str, help="Path to config file", default=".env")
    parser.add_argument("--check", action="store_true", help="Check audio devices and monitors")
    parser.add_argument("--create-config", action="store_true", help="Create example config file")

    args = parser.parse_args()

    if args.create_config:
        create_example_env_file()
        print("Example configuration file created at .env.example")
        print("Please copy it to .env and fill in your API key.")
        return

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("Please check your configuration file.")
        return

    if args.check:
        setup_logging(config.log_level)
        print("Checking system status...")
        if not config.has_credentials:
            print("  api key: missing")
        for component, state in check_system_status().items():
            print(f"  {component}: {state}")
        return

    from omnivision.tui.app import OmniVisionApp, setup_tui_logging
    setup_tui_logging(config.log_level)
    app = OmniVisionApp(config)
    app.run()


if __name__ == "__main__":
    main()
