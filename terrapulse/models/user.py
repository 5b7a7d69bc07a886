from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Contribution:
    """
    A donation recorded against a conservation project.

    Attributes:
        amount: Amount contributed (positive)
        project_id: Identifier of the conservation project
        timestamp: Nanoseconds since the Unix epoch
        transaction_hash: Display fingerprint of the contribution
    """

    amount: int
    project_id: str
    timestamp: int
    transaction_hash: str


@dataclass
class User:
    """
    A registered marketplace account, keyed by principal.

    `adopted_nfts` is ordered and not deduplicated. NFTs minted by the user
    are owned through `NFT.owner` and only appear here once acquired through
    a purchase or transfer.
    """

    principal_id: str
    username: str
    created_at: int
    last_login: int
    email: str | None = None
    profile_image: str | None = None
    adopted_nfts: list[str] = field(default_factory=list)
    rewards_points: int = 0
    conservation_contributions: list[Contribution] = field(default_factory=list)

    def adopt(self, nft_id: str) -> None:
        """Append an NFT to the adopted list."""
        self.adopted_nfts.append(nft_id)

    def release(self, nft_id: str) -> None:
        """Remove every occurrence of an NFT. No-op if absent."""
        self.adopted_nfts = [adopted for adopted in self.adopted_nfts if adopted != nft_id]

    def has_adopted(self, nft_id: str) -> bool:
        """Whether the NFT is in the adopted list."""
        return nft_id in self.adopted_nfts
