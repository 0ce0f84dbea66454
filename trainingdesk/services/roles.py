from typing import Dict, List

from trainingdesk.errors import BadRequest

VALID_ROLES = ("Trainer", "Examiner", "Admin")

ROLE_DEFINITIONS: Dict[str, dict] = {
    "Trainer": {
        "name": "Trainer",
        "description": "Can manage training sessions and view training department",
        "permissions": ["training.view", "training.create", "training.update", "control.view"],
        "departments": ["TRAINING DEPARTMENT", "STAFF DEPARTMENT (Training, Pickup Training, Control)"],
    },
    "Examiner": {
        "name": "Examiner",
        "description": "Can manage examinations and view exam department",
        "permissions": ["examination.view", "examination.create", "examination.update", "control.view"],
        "departments": ["EXAM DEPARTMENT", "STAFF DEPARTMENT (Examination, Control)"],
    },
    "Admin": {
        "name": "Admin",
        "description": "Full access to all departments and management features",
        "permissions": ["*"],
        "departments": ["All Departments", "MANAGEMENT DEPARTMENT"],
    },
}


def permissions_for(role: str) -> List[str]:
    """Permissions are always derived from the role table; unknown roles get none."""
    definition = ROLE_DEFINITIONS.get(role)
    return list(definition["permissions"]) if definition else []


def check_role(role: str) -> str:
    if role not in VALID_ROLES:
        raise BadRequest("Invalid role. Must be Trainer, Examiner, or Admin")
    return role
