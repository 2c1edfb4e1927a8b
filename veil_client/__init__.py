from veil_client.core.client.veil import VeilClient, get_veil_client
from veil_client.dal.datamodel.order import Side, TokenType
from veil_client.utils.numeric import from_shares, from_wei, to_shares, to_wei

__all__ = [
    "VeilClient",
    "get_veil_client",
    "Side",
    "TokenType",
    "to_wei",
    "from_wei",
    "to_shares",
    "from_shares",
]
