"""
Map Locations Service application package.

- app.main: API surface (`GET /api/map`) and service lifecycle.
- app.models: Location record models.
- app.cache: Snapshot store and the refresh coordinator guarding it.
- app.persistence: Storage backends (MongoDB).

Guidelines:
- One snapshot per process, owned by the service instance.
- Every read and write of the snapshot happens under its lock.
"""
