class NotFoundError(Exception):
    """A referenced record does not exist."""

    entity = "Record"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class AssetNotFoundError(NotFoundError):
    entity = "Asset"


class EngineerNotFoundError(NotFoundError):
    entity = "Engineer"


class ProjectNotFoundError(NotFoundError):
    entity = "Project"


class InvalidReportRequest(ValueError):
    pass
