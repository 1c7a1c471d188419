from typing import Optional, Dict, Any, Protocol


class AuditLogger(Protocol):
    def log(self, action: str, actor_id: str, target_id: str, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        ...
