"""
project_service/store.py

ProjectStore: persistence boundary for project records.

All lookups see live (non-deleted) rows only. Soft-deleted projects keep their
row with the code rewritten to "<code>-<id>", so they never collide with a new
project reusing the original code.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from project_service.config import IS_DEV
from project_service.db import (
    INTEGRITY_ERRORS,
    commit,
    execute_query,
    get_db_connection,
    insert_returning_id,
    rollback,
    row_to_dict,
)
from project_service.models import Project, ProjectStatus

PROJECT_COLUMNS = (
    "id, project_code, project_name, assigned_manager, start_date, end_date, "
    "project_detail, project_status, is_deleted, inserted_at, inserted_by, "
    "last_updated_at, last_updated_by"
)


def _to_row(project: Project) -> Dict[str, Any]:
    """Flatten a Project into named SQL parameters."""
    return {
        "project_code": project.project_code,
        "project_name": project.project_name,
        "assigned_manager": project.assigned_manager,
        "start_date": project.start_date.isoformat() if project.start_date else None,
        "end_date": project.end_date.isoformat() if project.end_date else None,
        "project_detail": project.project_detail,
        "project_status": project.project_status.value,
        "is_deleted": 1 if project.is_deleted else 0,
        "inserted_at": project.inserted_at.isoformat() if project.inserted_at else None,
        "inserted_by": project.inserted_by,
        "last_updated_at": project.last_updated_at.isoformat() if project.last_updated_at else None,
        "last_updated_by": project.last_updated_by,
    }


def _from_row(row: Any) -> Project:
    return Project(**row_to_dict(row))


class ProjectStore:
    """
    Repository over the projects table.

    Args:
        db_path: SQLite file override; None uses DATABASE_PATH from config.
            Ignored when DATABASE_URL points at PostgreSQL.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path

    def find_by_code(self, project_code: str) -> Optional[Project]:
        with get_db_connection(self.db_path) as conn:
            row = execute_query(
                conn,
                f"SELECT {PROJECT_COLUMNS} FROM projects "
                "WHERE project_code = :project_code AND is_deleted = 0",
                {"project_code": project_code},
            ).fetchone()
        return _from_row(row) if row else None

    def find_all(self) -> List[Project]:
        with get_db_connection(self.db_path) as conn:
            rows = execute_query(
                conn,
                f"SELECT {PROJECT_COLUMNS} FROM projects WHERE is_deleted = 0 ORDER BY id",
            ).fetchall()
        return [_from_row(row) for row in rows]

    def find_all_by_manager(self, assigned_manager: str) -> List[Project]:
        with get_db_connection(self.db_path) as conn:
            rows = execute_query(
                conn,
                f"SELECT {PROJECT_COLUMNS} FROM projects "
                "WHERE assigned_manager = :assigned_manager AND is_deleted = 0 ORDER BY id",
                {"assigned_manager": assigned_manager},
            ).fetchall()
        return [_from_row(row) for row in rows]

    def count_non_completed_by_manager(self, assigned_manager: str) -> int:
        with get_db_connection(self.db_path) as conn:
            row = execute_query(
                conn,
                "SELECT COUNT(*) AS n FROM projects "
                "WHERE assigned_manager = :assigned_manager "
                "AND project_status <> :completed AND is_deleted = 0",
                {"assigned_manager": assigned_manager, "completed": ProjectStatus.COMPLETED.value},
            ).fetchone()
        return int(row_to_dict(row).get("n", 0))

    def save(self, project: Project) -> Project:
        """
        Insert the project when it has no id yet, otherwise overwrite its row.

        Returns:
            A copy of the project carrying its id
        """
        params = _to_row(project)

        with get_db_connection(self.db_path) as conn:
            try:
                project_id = self._write(conn, project, params)
            except INTEGRITY_ERRORS:
                rollback(conn)
                raise
            commit(conn)

        if IS_DEV:
            print(f"[PROJECTS] Saved project_id={project_id}, code={project.project_code!r}, "
                  f"status={project.project_status.value}, deleted={project.is_deleted}")

        return project.model_copy(update={"id": project_id})

    def _write(self, conn: Any, project: Project, params: Dict[str, Any]) -> int:
        """Run the INSERT or UPDATE for save() and return the row id."""
        if project.id is None:
            return insert_returning_id(
                conn,
                """
                INSERT INTO projects (
                    project_code, project_name, assigned_manager, start_date, end_date,
                    project_detail, project_status, is_deleted, inserted_at, inserted_by,
                    last_updated_at, last_updated_by
                ) VALUES (
                    :project_code, :project_name, :assigned_manager, :start_date, :end_date,
                    :project_detail, :project_status, :is_deleted, :inserted_at, :inserted_by,
                    :last_updated_at, :last_updated_by
                )
                """,
                params,
            )

        execute_query(
            conn,
            """
            UPDATE projects SET
                project_code = :project_code,
                project_name = :project_name,
                assigned_manager = :assigned_manager,
                start_date = :start_date,
                end_date = :end_date,
                project_detail = :project_detail,
                project_status = :project_status,
                is_deleted = :is_deleted,
                inserted_at = :inserted_at,
                inserted_by = :inserted_by,
                last_updated_at = :last_updated_at,
                last_updated_by = :last_updated_by
            WHERE id = :id
            """,
            {**params, "id": project.id},
        )
        return project.id
