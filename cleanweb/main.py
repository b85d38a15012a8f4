# cleanweb/main.py
"""
Process entry point.

    $ cleanweb            (console script)
    $ python -m cleanweb

Configures the process logger, builds the application and serves it with
uvicorn until the process is signaled to stop. Startup failures are logged
as critical and turn into exit status 1.
"""

import sys
from typing import Optional, Sequence

import uvicorn

from cleanweb.adapters.web.main import create_app
from cleanweb.shared.config import Settings, settings as default_settings
from cleanweb.shared.logging_config import logging_scope


def serve(settings: Settings) -> None:
    """Builds the application and blocks in uvicorn's server loop."""
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        ssl_certfile=settings.SSL_CERTFILE,
        ssl_keyfile=settings.SSL_KEYFILE,
        proxy_headers=True,
        forwarded_allow_ips=settings.FORWARDED_ALLOW_IPS,
        # Logging is owned by logging_scope
        log_config=None,
    )


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    """
    Runs the host and returns the process exit status.

    ``argv`` is accepted for the console-script calling convention but is
    not read: the host takes no command-line flags, all configuration comes
    from the environment (see ``Settings``).
    """
    settings = settings or default_settings
    try:
        with logging_scope(settings) as log:
            log.info("starting_up", env=settings.APP_ENV.value, host=settings.HOST, port=settings.PORT)
            serve(settings)
    except Exception:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
