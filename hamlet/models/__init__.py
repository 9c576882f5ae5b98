# hamlet/models/__init__.py
from __future__ import annotations

from hamlet.models.user import User  # noqa: F401
from hamlet.models.session import SessionToken  # noqa: F401
from hamlet.models.village import Village  # noqa: F401
from hamlet.models.village_building import VillageBuilding  # noqa: F401
from hamlet.models.village_token import VillageToken  # noqa: F401
from hamlet.models.account import Account  # noqa: F401
from hamlet.models.id_counter import IdCounter  # noqa: F401
from hamlet.models.mail_message import MailMessage  # noqa: F401
