"""Allow ``python -m haproxy_statsd``."""

from .cli import main

if __name__ == "__main__":
    main()
