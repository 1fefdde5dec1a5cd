import os
from dotenv import load_dotenv
load_dotenv()
# ---- Ledger (shared) ----
LEDGER_PROVIDER = os.environ.get("LEDGER_PROVIDER", "blockcypher")
LEDGER_MIN_INTERVAL_SEC = float(os.environ.get("LEDGER_MIN_INTERVAL_SEC", "12"))
LEDGER_TIMEOUT_SEC = 15

# ---- Blockchain.com ----
BLOCKCHAIN_INFO_BASE_URL = "https://blockchain.info"
BLOCKCHAIN_INFO_PAGE_SIZE = 10

# ---- BlockCypher ----
BLOCKCYPHER_BASE_URL = "https://api.blockcypher.com/v1/btc/main/addrs"
BLOCKCYPHER_TOKEN = os.environ.get("BLOCKCYPHER_TOKEN")
BLOCKCYPHER_PAGE_SIZE = 5

# ----- Address input -----
ADDRESS_MIN_LEN = 26
ADDRESS_MAX_LEN = 35
ADDRESS_PREFIXES = ("1", "3", "bc1")

# ----- Graph rendering -----
OUTGOING_COLOR = "#ff6666"   # red
INCOMING_COLOR = "#00ff88"   # green
NODE_WEIGHT = 3

# ----- Logging -----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "console")   # console | json
