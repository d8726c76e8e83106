import os
from dotenv import load_dotenv

# Load Environment Variables from the working directory .env
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # JITO BUNDLE ORCHESTRATOR CONFIGURATION
    # ═══════════════════════════════════════════════════════════════════

    # --- Console ---
    SILENT_MODE = _env_flag("SILENT_MODE", False)
    LOG_DIR = os.getenv("LOG_DIR", os.path.abspath("logs"))

    # --- Endpoints ---
    SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
    JITO_REGION = os.getenv("JITO_REGION", "mainnet")
    JITO_BLOCK_ENGINE_URL = os.getenv("JITO_BLOCK_ENGINE_URL", "")
    JITO_REQUEST_TIMEOUT = float(os.getenv("JITO_REQUEST_TIMEOUT", "10"))
    JITO_EXPLORER_URL = "https://explorer.jito.wtf/bundle"

    # --- Main Wallet (base58 secret key) ---
    MAIN_WALLET_PRIVATE_KEY = os.getenv("MAIN_WALLET_PRIVATE_KEY", "")

    # --- Liveness anchor ---
    ANCHOR_COMMITMENT = "confirmed"

    # --- Tip ---
    JITO_MINIMUM_TIP_LAMPORTS = 1_000

    # --- Status polling (milliseconds) ---
    WAIT_BEFORE_POLL_MS = 5_000
    POLL_INTERVAL_MS = 3_000
    POLL_TIMEOUT_MS = 30_000

    # Block engine accepts at most 5 transactions per bundle
    MAX_BUNDLE_TRANSACTIONS = 5

    # --- Fund orchestration ---
    COLLECT_RESERVE_LAMPORTS = 5_000  # left behind for rent exemption
    TRADES_PER_WALLET = 5
    LAMPORTS_PER_SOL = 1_000_000_000
