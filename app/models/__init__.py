"""
Stored records for the LD backend.

Import records from their modules (app.models.account, app.models.hunt_log, ...);
the document store imports app.models.document directly, so this package
must not import the typed records eagerly.
"""
