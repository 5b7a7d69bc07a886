"""
Marketplace — registration, minting, listing and purchase of NFTs.

Every mutation follows the same shape:
1. Identity gate (anonymous callers are rejected)
2. Validation against the store (typed error, nothing written)
3. Writes to one or more of users / nfts / listings

All three steps run under the store lock, so no other operation can see a
partial update.

MISSING-USER POLICY: purchase and transfer tolerate a buyer, seller or
recipient with no User record. The NFT changes hands regardless and the
missing record is logged at WARNING. Registration is not a precondition for
owning an NFT.
"""

import copy
import logging

from terrapulse.models.failure import (
    InvalidOperationError,
    MarketplaceSystemError,
    NFTNotFoundError,
    NotAuthorizedError,
    UserNotFoundError,
)
from terrapulse.models.nft import (
    NFT,
    ConservationData,
    ConservationStatus,
    EntityType,
    NFTMetadata,
    PopulationTrend,
    Transaction,
    TransactionType,
)
from terrapulse.models.user import Contribution, User
from terrapulse.services.id_generator import IdGenerator
from terrapulse.services.identity import ANONYMOUS_PRINCIPAL, ensure_authorized, is_anonymous
from terrapulse.services.rewards import calculate_rewards
from terrapulse.services.store import EntityStore

logger = logging.getLogger(__name__)


class Marketplace:
    """Operations over an EntityStore."""

    def __init__(
        self,
        store: EntityStore | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.store = store if store is not None else EntityStore()
        self.ids = id_generator or IdGenerator()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def register_user(self, caller: str, username: str, email: str | None = None) -> str:
        """
        Register the caller as a user.

        Raises:
            NotAuthorizedError: If the caller is anonymous
            InvalidOperationError: If the caller is already registered
        """
        ensure_authorized(caller)

        with self.store.lock:
            if caller in self.store.users:
                raise InvalidOperationError("User already exists")

            now = self.ids.now()
            self.store.users[caller] = User(
                principal_id=caller,
                username=username,
                email=email,
                created_at=now,
                last_login=now,
            )

        logger.info("USER_REGISTERED", extra={"principal_id": caller})
        return caller

    def touch_login(self, caller: str) -> User:
        """
        Record a login by the caller.

        Raises:
            NotAuthorizedError: If the caller is anonymous
            UserNotFoundError: If the caller is not registered
        """
        ensure_authorized(caller)

        with self.store.lock:
            user = self.store.users.get(caller)
            if user is None:
                raise UserNotFoundError(caller)
            user.last_login = self.ids.now()
            return copy.deepcopy(user)

    def record_contribution(self, caller: str, project_id: str, amount: int) -> Contribution:
        """
        Record a conservation contribution by the caller.

        Raises:
            NotAuthorizedError: If the caller is anonymous
            InvalidOperationError: If amount is not positive or project_id is blank
            UserNotFoundError: If the caller is not registered
        """
        ensure_authorized(caller)

        if amount <= 0:
            raise InvalidOperationError("Contribution amount must be positive")
        if not project_id.strip():
            raise InvalidOperationError("Project id is required")

        with self.store.lock:
            user = self.store.users.get(caller)
            if user is None:
                raise UserNotFoundError(caller)

            timestamp = self.ids.now()
            contribution = Contribution(
                amount=amount,
                project_id=project_id,
                timestamp=timestamp,
                transaction_hash=self.ids.transaction_hash(timestamp, caller),
            )
            user.conservation_contributions.append(contribution)

        logger.info(
            "CONTRIBUTION_RECORDED",
            extra={"principal_id": caller, "project_id": project_id, "amount": amount},
        )
        return contribution

    # -------------------------------------------------------------------------
    # NFTs
    # -------------------------------------------------------------------------

    def mint_nft(self, caller: str, metadata: NFTMetadata, entity_type: EntityType) -> str:
        """
        Mint a new NFT owned by the caller.

        The NFT starts unlisted with a single Mint transaction. The caller's
        adopted_nfts list is left unchanged.

        Raises:
            NotAuthorizedError: If the caller is anonymous
        """
        ensure_authorized(caller)

        with self.store.lock:
            nft_id = self.ids.new_nft_id(self.store.nfts)
            timestamp = self.ids.now()

            self.store.nfts[nft_id] = NFT(
                id=nft_id,
                entity_type=entity_type,
                metadata=copy.deepcopy(metadata),
                owner=caller,
                price=None,
                creation_date=timestamp,
                transaction_history=[
                    Transaction(
                        transaction_type=TransactionType.MINT,
                        from_principal=ANONYMOUS_PRINCIPAL,
                        to_principal=caller,
                        price=0,
                        timestamp=timestamp,
                        transaction_hash=self.ids.transaction_hash(timestamp, caller),
                    )
                ],
                conservation_data=ConservationData(
                    status=ConservationStatus.LEAST_CONCERN,
                    population_trend=PopulationTrend.UNKNOWN,
                    last_updated=timestamp,
                ),
            )

        logger.info(
            "NFT_MINTED",
            extra={"nft_id": nft_id, "owner": caller, "kind": entity_type.kind},
        )
        return nft_id

    def transfer_nft(self, caller: str, nft_id: str, recipient: str) -> None:
        """
        Give an NFT to another principal without payment.

        Any active listing is withdrawn.

        Raises:
            NotAuthorizedError: If the caller is anonymous or not the owner
            InvalidOperationError: If the recipient is anonymous or the caller
            NFTNotFoundError: If the NFT does not exist
        """
        ensure_authorized(caller)

        if is_anonymous(recipient):
            raise InvalidOperationError("Recipient must not be anonymous")
        if recipient == caller:
            raise InvalidOperationError("Cannot transfer an NFT to yourself")

        with self.store.lock:
            nft = self._require_nft(nft_id)
            if not nft.is_owned_by(caller):
                raise NotAuthorizedError(detail=f"Caller does not own NFT '{nft_id}'")

            timestamp = self.ids.now()
            nft.owner = recipient
            nft.price = None
            self.store.listings.pop(nft_id, None)
            nft.transaction_history.append(
                Transaction(
                    transaction_type=TransactionType.TRANSFER,
                    from_principal=caller,
                    to_principal=recipient,
                    price=0,
                    timestamp=timestamp,
                    transaction_hash=self.ids.transaction_hash(timestamp, recipient),
                )
            )
            self._move_adoption(nft_id, from_principal=caller, to_principal=recipient)

        logger.info(
            "NFT_TRANSFERRED",
            extra={"nft_id": nft_id, "from": caller, "to": recipient},
        )

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_nft_for_sale(self, caller: str, nft_id: str, price: int) -> None:
        """
        List an NFT at a fixed asking price, replacing any existing price.

        Raises:
            NotAuthorizedError: If the caller is anonymous or not the owner
            NFTNotFoundError: If the NFT does not exist
            InvalidOperationError: If price is negative
        """
        ensure_authorized(caller)

        if price < 0:
            raise InvalidOperationError("Price must be non-negative")

        with self.store.lock:
            nft = self._require_nft(nft_id)
            if not nft.is_owned_by(caller):
                raise NotAuthorizedError(detail=f"Caller does not own NFT '{nft_id}'")

            nft.price = price
            self.store.listings[nft_id] = price

        logger.info("NFT_LISTED", extra={"nft_id": nft_id, "price": price})

    def delist_nft(self, caller: str, nft_id: str) -> None:
        """
        Withdraw an NFT from sale.

        Raises:
            NotAuthorizedError: If the caller is anonymous or not the owner
            NFTNotFoundError: If the NFT does not exist
            InvalidOperationError: If the NFT is not listed
        """
        ensure_authorized(caller)

        with self.store.lock:
            nft = self._require_nft(nft_id)
            if not nft.is_owned_by(caller):
                raise NotAuthorizedError(detail=f"Caller does not own NFT '{nft_id}'")
            if not nft.is_listed():
                raise InvalidOperationError("NFT not for sale")

            nft.price = None
            self.store.listings.pop(nft_id, None)

        logger.info("NFT_DELISTED", extra={"nft_id": nft_id})

    def purchase_nft(self, caller: str, nft_id: str) -> None:
        """
        Buy a listed NFT at its asking price.

        Payment is simulated: ownership moves, the listing closes, a Sale
        transaction is recorded and the buyer earns reward points.

        Raises:
            NotAuthorizedError: If the caller is anonymous
            NFTNotFoundError: If the NFT does not exist
            InvalidOperationError: If the NFT is not listed, or the caller
                already owns it
            MarketplaceSystemError: If a listed NFT has no owner
        """
        ensure_authorized(caller)

        with self.store.lock:
            nft = self._require_nft(nft_id)

            price = nft.price
            if price is None:
                raise InvalidOperationError("NFT not for sale")

            seller = nft.owner
            if seller is None:
                raise MarketplaceSystemError("No owner found")
            if seller == caller:
                raise InvalidOperationError("Cannot purchase your own NFT")

            # Simulated settlement, no ledger transfer happens here
            timestamp = self.ids.now()
            nft.owner = caller
            nft.price = None
            nft.transaction_history.append(
                Transaction(
                    transaction_type=TransactionType.SALE,
                    from_principal=seller,
                    to_principal=caller,
                    price=price,
                    timestamp=timestamp,
                    transaction_hash=self.ids.transaction_hash(timestamp, caller),
                )
            )
            self.store.listings.pop(nft_id, None)

            buyer_profile = self._move_adoption(nft_id, from_principal=seller, to_principal=caller)
            if buyer_profile is not None:
                buyer_profile.rewards_points += calculate_rewards(price)

        logger.info(
            "NFT_PURCHASED",
            extra={"nft_id": nft_id, "seller": seller, "buyer": caller, "price": price},
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_nft(self, nft_id: str) -> NFT:
        """
        Look up an NFT.

        Raises:
            NFTNotFoundError: If the NFT does not exist
        """
        with self.store.lock:
            return copy.deepcopy(self._require_nft(nft_id))

    def get_user_profile(self, principal_id: str) -> User:
        """
        Look up a user.

        Raises:
            UserNotFoundError: If no user is registered for the principal
        """
        with self.store.lock:
            user = self.store.users.get(principal_id)
            if user is None:
                raise UserNotFoundError(principal_id)
            return copy.deepcopy(user)

    def get_marketplace_listings(self) -> list[tuple[str, int]]:
        """Active (nft_id, price) listings, in no guaranteed order."""
        with self.store.lock:
            return list(self.store.listings.items())

    def get_nfts_by_owner(self, principal_id: str) -> list[NFT]:
        """NFTs currently owned by the principal, minted ones included."""
        with self.store.lock:
            return [
                copy.deepcopy(nft) for nft in self.store.nfts.values() if nft.owner == principal_id
            ]

    # -------------------------------------------------------------------------
    # Helpers (caller holds the lock)
    # -------------------------------------------------------------------------

    def _require_nft(self, nft_id: str) -> NFT:
        nft = self.store.nfts.get(nft_id)
        if nft is None:
            raise NFTNotFoundError(nft_id)
        return nft

    def _move_adoption(self, nft_id: str, from_principal: str, to_principal: str) -> User | None:
        """
        Move an NFT between users' adopted lists.

        Missing user records are skipped and logged. Returns the receiving
        user's record, or None if it does not exist.
        """
        receiver = self.store.users.get(to_principal)
        if receiver is not None:
            receiver.adopt(nft_id)
        else:
            logger.warning(
                "ADOPTION_USER_MISSING",
                extra={"nft_id": nft_id, "principal_id": to_principal, "role": "receiver"},
            )

        previous = self.store.users.get(from_principal)
        if previous is not None:
            previous.release(nft_id)
        else:
            logger.warning(
                "ADOPTION_USER_MISSING",
                extra={"nft_id": nft_id, "principal_id": from_principal, "role": "previous_owner"},
            )

        return receiver
