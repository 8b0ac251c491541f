#!/usr/bin/env python3
import logging
import sys
from modlaunch import create_app, BIND, PORT, LOG_LEVEL

def _resolve_settings_file():
    if len(sys.argv) >= 2:
        return sys.argv[1]
    return None

if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(_resolve_settings_file())
    app.run(host=BIND, port=PORT, debug=False)
