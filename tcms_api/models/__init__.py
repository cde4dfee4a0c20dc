# tcms_api/models/__init__.py
import importlib

MODEL_MODULES = (
    "tcms_api.models.user",
    "tcms_api.models.security",
    "tcms_api.models.employee",
    "tcms_api.models.payroll.salary",
    "tcms_api.models.payroll.adjustments",
)


def load_all():
    """Import every model module so db.metadata is complete (create_all, autogenerate)."""
    return [importlib.import_module(name) for name in MODEL_MODULES]
