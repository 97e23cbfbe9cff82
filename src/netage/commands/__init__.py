"""Built-in CLI sub-commands for netage.

Each module in this package exposes one or more Typer commands that
:func:`netage.app.main` registers on the root application:

* :mod:`~netage.commands.process` -- ``process`` and ``lint`` a document.
* :mod:`~netage.commands.profiles` -- list ``profiles`` and ``plugins``.
* :mod:`~netage.commands.build` -- ``build`` a profile archive.
"""
