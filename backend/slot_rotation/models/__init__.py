"""ORM Models: SQLAlchemy declarative models for slot rotation.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from slot_rotation.models.purchased_slot import PurchasedSlot  # noqa: F401
from slot_rotation.models.rotation_lease import RotationLeaseRecord  # noqa: F401
from slot_rotation.models.rotation_run import RotationRun  # noqa: F401
