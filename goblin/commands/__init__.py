"""Interactive command handlers, one module per ``goblin`` subcommand.

Every module exposes ``run(...)``; :mod:`goblin.cli` maps subcommands and
flags onto them.
"""
