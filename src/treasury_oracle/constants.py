"""Treasury addresses, endpoints and pricing constants."""

from typing import TypedDict


class TreasuryAddresses(TypedDict):
    BITCOIN: str
    EVM: str  # Ethereum mainnet, Base, Optimism, Arbitrum and BSC
    SOLANA: str
    XRP: str
    TON: str
    LUX: str
    ZOO: str


class NetworkEndpoints(TypedDict):
    bitcoin_api: str
    solana_rpc: str
    xrp_api: str
    ton_api: str
    evm_rpcs: dict[str, str]


class ChainDisplay(TypedDict):
    name: str
    testnet_name: str
    symbol: str
    color: str
    icon: str


MAINNET_TREASURY: TreasuryAddresses = {
    "BITCOIN": "bc1qem8jywyuc9wtgf7y5n9tyq6tknpj3l85tzg9y6",
    "EVM": "0xAaf3a7253c73a58f2713f454717C5338c6573d62",
    "SOLANA": "BPTZhkTdRwqnrb7PnWvi6SkCWQHcvUZrfaYvPkZ2YD8R",
    "XRP": "raBQUYdAhnnojJQ6Xi3eXztZ74ot24RDq1",
    "TON": "UQCx0_0l9AxIouVBxThCRAwO7Yrz6rpQGI-1CS7h-lwjqRTW",
    "LUX": "0x14542918a9032248ef30d9bc1d57983691e3ade4",
    "ZOO": "0xAaf3a7253c73a58f2713f454717C5338c6573d62",
}

TESTNET_TREASURY: TreasuryAddresses = {
    "BITCOIN": "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx",
    "EVM": "0xAaf3a7253c73a58f2713f454717C5338c6573d62",
    "SOLANA": "BPTZhkTdRwqnrb7PnWvi6SkCWQHcvUZrfaYvPkZ2YD8R",
    "XRP": "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh",
    "TON": "UQCx0_0l9AxIouVBxThCRAwO7Yrz6rpQGI-1CS7h-lwjqRTW",
    "LUX": "0x14542918a9032248ef30d9bc1d57983691e3ade4",
    "ZOO": "0xAaf3a7253c73a58f2713f454717C5338c6573d62",
}

MAINNET_ENDPOINTS: NetworkEndpoints = {
    "bitcoin_api": "https://blockstream.info/api",
    "solana_rpc": "https://api.mainnet-beta.solana.com",
    "xrp_api": "https://api.xrpscan.com/api/v1",
    "ton_api": "https://toncenter.com/api/v2",
    "evm_rpcs": {
        "ethereum": "https://eth.llamarpc.com",
        "base": "https://mainnet.base.org",
        "optimism": "https://mainnet.optimism.io",
        "arbitrum": "https://arb1.arbitrum.io/rpc",
        "bsc": "https://bsc-dataseed.binance.org",
        "lux": "https://api.lux.network",
        "zoo": "https://rpc.zoo.id",
    },
}

TESTNET_ENDPOINTS: NetworkEndpoints = {
    "bitcoin_api": "https://blockstream.info/testnet/api",
    "solana_rpc": "https://api.devnet.solana.com",
    "xrp_api": "https://testnet.xrpl-labs.com",
    "ton_api": "https://testnet.toncenter.com/api/v2",
    "evm_rpcs": {
        "ethereum": "https://rpc.sepolia.org",
        "base": "https://sepolia.base.org",
        "optimism": "https://sepolia.optimism.io",
        "arbitrum": "https://sepolia-rollup.arbitrum.io/rpc",
        "bsc": "https://data-seed-prebsc-1-s1.binance.org:8545",
        "lux": "https://api.lux-test.network",
        "zoo": "https://rpc-test.zoo.id",
    },
}

# Sub-chain labels for the EVM networks summed into the ETHEREUM entry
ETHEREUM_SUB_CHAINS: dict[str, str] = {
    "ethereum": "Mainnet",
    "base": "Base",
    "optimism": "Optimism",
    "arbitrum": "Arbitrum",
}

ETHEREUM_TESTNET_SUB_CHAINS: dict[str, str] = {
    "ethereum": "Sepolia",
    "base": "Base Sepolia",
    "optimism": "OP Sepolia",
    "arbitrum": "Arb Sepolia",
}

# Display order is also the tie-break order of the snapshot sort
CHAIN_DISPLAY: dict[str, ChainDisplay] = {
    "BITCOIN": {
        "name": "Bitcoin",
        "testnet_name": "Bitcoin (Testnet)",
        "symbol": "BTC",
        "color": "#F7931A",
        "icon": "/images/tokens/bitcoin.png",
    },
    "ETHEREUM": {
        "name": "Ethereum",
        "testnet_name": "Ethereum (Sepolia)",
        "symbol": "ETH",
        "color": "#627EEA",
        "icon": "/images/tokens/ethereum.png",
    },
    "BSC": {
        "name": "BNB Chain",
        "testnet_name": "BNB (Testnet)",
        "symbol": "BNB",
        "color": "#F0B90B",
        "icon": "/images/tokens/bnb.png",
    },
    "SOLANA": {
        "name": "Solana",
        "testnet_name": "Solana (Devnet)",
        "symbol": "SOL",
        "color": "#9945FF",
        "icon": "/images/tokens/solana.png",
    },
    "XRP": {
        "name": "XRP Ledger",
        "testnet_name": "XRP (Testnet)",
        "symbol": "XRP",
        "color": "#23292F",
        "icon": "/images/tokens/xrp.png",
    },
    "TON": {
        "name": "TON",
        "testnet_name": "TON (Testnet)",
        "symbol": "TON",
        "color": "#0088CC",
        "icon": "/images/tokens/ton.png",
    },
    "LUX": {
        "name": "Lux",
        "testnet_name": "Lux (Testnet)",
        "symbol": "LUX",
        "color": "#C9A227",
        "icon": "/images/tokens/lux.png",
    },
    "ZOO": {
        "name": "Zoo Network",
        "testnet_name": "Zoo (Testnet)",
        "symbol": "ZOO",
        "color": "#10B981",
        "icon": "/images/tokens/zoo.png",
    },
}

DEFAULT_COINGECKO_API_URL = "https://api.coingecko.com/api/v3"

COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "SOL": "solana",
    "XRP": "ripple",
    "TON": "the-open-network",
    "LUX": "lux-network",
    "ZOO": "zoo-token",
}

TESTNET_PRICES: dict[str, float] = {
    "BTC": 100000.0,
    "ETH": 3500.0,
    "BNB": 600.0,
    "SOL": 200.0,
    "XRP": 2.5,
    "TON": 5.0,
    "LUX": 0.5,
    "ZOO": 0.1,
}

# Smallest-unit exponents per chain family
BITCOIN_DECIMALS = 8
EVM_DECIMALS = 18
SOLANA_DECIMALS = 9
XRP_DECIMALS = 6
TON_DECIMALS = 9

DEFAULT_FETCH_TIMEOUT = 8.0  # seconds per request
DEFAULT_REFRESH_INTERVAL = 30.0  # seconds between aggregation cycles

# Presale and bonding curve
TOTAL_SUPPLY = 1_000_000_000
SALE_SUPPLY = 900_000_000  # 100M held back as LP reserve
FUND_TARGET = 100_000_000  # USD
MIN_PRICE = 0.01
MAX_PRICE = 1.00

CHAIN_ALLOCATIONS: dict[str, float] = {
    "BITCOIN": 0.20,
    "ETHEREUM": 0.25,  # includes the L2s
    "BSC": 0.10,
    "SOLANA": 0.15,
    "XRP": 0.10,
    "TON": 0.10,
    "LUX": 0.05,
    "ZOO": 0.05,
}

# Networks sharing a treasury address that price against a single bucket
CHAIN_ALIASES: dict[str, str] = {
    "BASE": "ETHEREUM",
    "OPTIMISM": "ETHEREUM",
    "ARBITRUM": "ETHEREUM",
}
