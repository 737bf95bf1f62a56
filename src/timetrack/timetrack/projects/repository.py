from __future__ import annotations

from typing import Optional, Protocol


class ProjectRepository(Protocol):
    def get_name(self, project_id: int) -> Optional[str]:
        raise NotImplementedError
