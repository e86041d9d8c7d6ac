from storefront.models.user import User, UserRole, DiscordRole, system_user_row
from storefront.models.order import Order, OrderStatus
from storefront.models.wallet import (
    Wallet,
    WalletTransaction,
    WalletType,
    WalletTransactionType,
    WalletTransactionStatus,
    LedgerCounter,
)
