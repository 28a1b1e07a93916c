"""User identity attributes."""

from __future__ import annotations

import uuid

from pyanalytics.models._base import ValueMap

ANONYMOUS_ID_KEY = "anonymousId"
USER_ID_KEY = "userId"
EMAIL_KEY = "email"
NAME_KEY = "name"
USERNAME_KEY = "username"
PHONE_KEY = "phone"


class Traits(ValueMap):
    """Attributes describing the current user.

    Clients should change traits through
    :meth:`pyanalytics.client.AnalyticsClient.identify`; a ``Traits``
    instance read back from a context snapshot is read-only.
    """

    @classmethod
    def create(cls) -> Traits:
        """Return new traits carrying a freshly generated anonymous id."""
        return cls().put_anonymous_id(str(uuid.uuid4()))

    def put_anonymous_id(self, anonymous_id: str) -> Traits:
        return self.put_value(ANONYMOUS_ID_KEY, anonymous_id)

    @property
    def anonymous_id(self) -> str | None:
        return self.get_string(ANONYMOUS_ID_KEY)

    def put_user_id(self, user_id: str) -> Traits:
        return self.put_value(USER_ID_KEY, user_id)

    @property
    def user_id(self) -> str | None:
        return self.get_string(USER_ID_KEY)

    def put_email(self, email: str) -> Traits:
        return self.put_value(EMAIL_KEY, email)

    @property
    def email(self) -> str | None:
        return self.get_string(EMAIL_KEY)

    def put_name(self, name: str) -> Traits:
        return self.put_value(NAME_KEY, name)

    @property
    def name(self) -> str | None:
        return self.get_string(NAME_KEY)

    def put_username(self, username: str) -> Traits:
        return self.put_value(USERNAME_KEY, username)

    @property
    def username(self) -> str | None:
        return self.get_string(USERNAME_KEY)

    def put_phone(self, phone: str) -> Traits:
        return self.put_value(PHONE_KEY, phone)

    @property
    def phone(self) -> str | None:
        return self.get_string(PHONE_KEY)

    @property
    def current_id(self) -> str | None:
        """User id when known, otherwise the anonymous id."""
        return self.user_id or self.anonymous_id
