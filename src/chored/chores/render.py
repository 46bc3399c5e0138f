"""Render chore for projects without their own."""

from typing import Sequence

from chored.core.render import render as render_files


async def render(gitattributes_extra: Sequence[str] = ()) -> None:
    """Write the ``./chored`` wrapper script and ``.gitattributes``.

    Projects generating more files define their own `render` chore in
    choredefs/render.py, which takes priority over this one.
    """
    await render_files([], gitattributes_extra=gitattributes_extra, wrapper_script=True)


__all__ = ["render"]
