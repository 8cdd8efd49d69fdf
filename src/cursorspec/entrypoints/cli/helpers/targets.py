"""Safe descriptions of what a connector connects to.

Connector URLs may embed credentials; everything shown in tables, logs or
JSON goes through `sanitize_url` first. Parsing uses SQLAlchemy's URL parser
and performs no I/O.
"""

from sqlalchemy.engine import URL, make_url

from cursorspec.interfaces.connector import Connector


def sanitize_url(url: str | URL) -> str:
    """Render a database URL with its password (if any) replaced by ``***``.

    Only the URL password field is redacted; secrets placed in query
    parameters are not scrubbed.
    """
    if isinstance(url, URL):
        return url.render_as_string(hide_password=True)
    return make_url(url).render_as_string(hide_password=True)


def describe_target(connector: Connector) -> str:
    """Return the connector's database location, credentials redacted."""
    if (url := getattr(connector, "url", None)) is not None:
        return sanitize_url(url)
    return str(getattr(connector, "database", ""))
