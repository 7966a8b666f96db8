"""Built-in CLI sub-commands for rekku.

* :mod:`~rekku.commands.request` -- send an HTTP request and stream the
  response body to stdout.
* :mod:`~rekku.commands.generate` -- compile an OpenAPI document into schema
  modules and operation templates inside the workspace.
* :mod:`~rekku.commands.inspect` -- preview what ``generate`` would produce
  without writing anything.

Each module exports a plain callback function registered directly on the
root app in :mod:`rekku.app`.
"""
