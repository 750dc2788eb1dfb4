"""Readers for the compact one-line DSN and transform notations.

DSN:        ``"host port, user password, dbName, sslMode"``
Transform:  ``"xOffset yOffset zIndex, xScale yScale"``, e.g. ``"0f 0f 0, 1f 1f"``

Both accept an optional ``dsn=`` / ``transform=`` prefix and surrounding
quotes, the way they are written on a command line.
"""

from __future__ import annotations

import math
import re
from typing import Any, Final

from devour.results import ResErr

_FLOAT_SUFFIX: Final = re.compile(r"[fF]$")


def _strip_prefix(text: str, name: str) -> ResErr[str]:
    body = text.strip()
    if "=" in body:
        key, _, body = body.partition("=")
        if key.strip() != name or "=" in body:
            return ResErr.fail(f"Invalid {name} notation")
    return ResErr.ok(body.replace('"', "").replace("'", "").strip())


def _parse_int(token: str) -> int | None:
    try:
        return int(token.strip())
    except ValueError:
        return None


def _parse_float(token: str) -> float | None:
    try:
        number = float(_FLOAT_SUFFIX.sub("", token.strip()))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def read_compact_dsn_notation(text: str) -> ResErr[dict[str, Any]]:
    """Parse a compact DSN. An empty ``sslMode`` segment leaves the mode unset."""

    if not isinstance(text, str):
        return ResErr.fail("Invalid DSN notation")
    stripped = _strip_prefix(text, "dsn")
    if stripped.error is not None:
        return ResErr.fail("Invalid DSN notation")
    segments = (stripped.result or "").split(",")
    if len(segments) != 4:
        return ResErr.fail("Wrong number of comma separated segments in DSN")

    host_and_port = segments[0].split()
    if len(host_and_port) != 2:
        return ResErr.fail("Missing either host or port in DSN")
    host, port_text = host_and_port
    port = _parse_int(port_text)
    if port is None:
        return ResErr.fail("Invalid port in DSN")

    user_and_password = segments[1].split()
    if len(user_and_password) != 2:
        return ResErr.fail("Missing either user or password in DSN")
    user, password = user_and_password

    db_name = segments[2].strip()
    if not db_name:
        return ResErr.fail("Missing dbName in DSN")

    dsn: dict[str, Any] = {
        "host": host,
        "port": port,
        "user": user,
        "password": password,
        "dbName": db_name,
    }
    ssl_mode = segments[3].strip()
    if ssl_mode:
        dsn["sslMode"] = ssl_mode
    return ResErr.ok(dsn)


def read_compact_transform_notation(text: str) -> ResErr[dict[str, Any]]:
    if not isinstance(text, str):
        return ResErr.fail("Invalid transform notation")
    stripped = _strip_prefix(text, "transform")
    if stripped.error is not None:
        return ResErr.fail("Invalid transform notation")
    segments = (stripped.result or "").split(",")
    if len(segments) != 2:
        return ResErr.fail("Invalid transform data")

    xyz = segments[0].split()
    if len(xyz) != 3:
        return ResErr.fail("Invalid transform xyz component")
    scale = segments[1].split()
    if len(scale) != 2:
        return ResErr.fail("Invalid transform scale component")

    x_offset = _parse_float(xyz[0])
    if x_offset is None:
        return ResErr.fail("Invalid transform x offset")
    y_offset = _parse_float(xyz[1])
    if y_offset is None:
        return ResErr.fail("Invalid transform y offset")
    z_index = _parse_int(xyz[2])
    if z_index is None:
        return ResErr.fail("Invalid transform z index")
    x_scale = _parse_float(scale[0])
    if x_scale is None:
        return ResErr.fail("Invalid transform x scale")
    y_scale = _parse_float(scale[1])
    if y_scale is None:
        return ResErr.fail("Invalid transform y scale")

    return ResErr.ok(
        {
            "xOffset": x_offset,
            "yOffset": y_offset,
            "zIndex": z_index,
            "xScale": x_scale,
            "yScale": y_scale,
        }
    )


__all__ = ["read_compact_dsn_notation", "read_compact_transform_notation"]
