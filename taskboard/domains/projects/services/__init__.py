from taskboard.domains.projects.services.project_service import (
    add_member,
    create_project,
    delete_project,
    get_project,
    list_projects,
    project_status_names,
    remove_member,
    require_admin,
    require_member,
    set_statuses,
    update_project,
)
from taskboard.domains.projects.services.task_service import (
    add_comment,
    apply_task_update,
    create_task,
    delete_task,
    get_task,
    list_comments,
    list_history,
    list_tasks,
    update_task,
)

__all__ = [
    "create_project",
    "update_project",
    "get_project",
    "list_projects",
    "delete_project",
    "set_statuses",
    "add_member",
    "remove_member",
    "project_status_names",
    "require_member",
    "require_admin",
    "create_task",
    "update_task",
    "apply_task_update",
    "get_task",
    "list_tasks",
    "add_comment",
    "list_comments",
    "list_history",
    "delete_task",
]
