"""StoredCart aggregate — the persisted form of an account cart.

One record per owner key. The payload is the same JSON array the guest store
keeps, so both media round-trip through the same decoding path. Applied
coupons are kept beside it as a JSON object keyed by shop ID.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Text

from checkout.domain import checkout


@checkout.aggregate
class StoredCart:
    owner_key = Identifier(identifier=True, required=True)
    payload = Text(default="[]")
    coupons = Text(default="{}")
    updated_at = DateTime()

    @classmethod
    def create(cls, owner_key, payload="[]", coupons="{}"):
        return cls(owner_key=owner_key, payload=payload, coupons=coupons, updated_at=datetime.now(UTC))

    def overwrite(self, payload):
        self.payload = payload
        self.updated_at = datetime.now(UTC)

    def overwrite_coupons(self, coupons):
        self.coupons = coupons
        self.updated_at = datetime.now(UTC)
