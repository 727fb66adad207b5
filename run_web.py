#!/usr/bin/env python
"""Start the Promptor HTTP API.

Uses the config file given as the first argument, else ``config.toml`` in
the working directory when present, else env and defaults.
"""

import os
import sys

from promptor.config import Config
from promptor.errors import ConfigException


def main():
    config_path = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        config = Config.load(config_path)
    except ConfigException as e:
        print(e)
        sys.exit(1)

    if not config.web.enabled:
        print("The HTTP API is off. Set [web] enabled = true to start it.")
        sys.exit(1)

    print(f"Serving schemas from {config.database.path}")
    print(f"Listening on http://{config.web.host}:{config.web.port}")

    # create_app runs in the uvicorn worker and reads the path from here
    if config_path:
        os.environ["CONFIG_FILE"] = config_path

    import uvicorn

    uvicorn.run(
        "promptor.api:create_app",
        host=config.web.host,
        port=config.web.port,
        factory=True,
    )


if __name__ == "__main__":
    main()
