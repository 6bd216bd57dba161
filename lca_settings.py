# lca_settings.py
import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

# Reference data locations
DATA_DIR = Path(os.getenv("LCA_DATA_DIR", str(BASE_DIR / "data")))
MODELS_DIR = Path(os.getenv("LCA_MODELS_DIR", str(BASE_DIR / "models")))

LCI_PROCESSES_FILE = DATA_DIR / "lci_processes.csv"
PRODUCT_MODIFIERS_FILE = DATA_DIR / "product_modifiers.csv"
LINEAR_MODEL_FILE = MODELS_DIR / "lr_coefficients.json"
TREE_MODEL_FILE = MODELS_DIR / "tree_model.json"

# Pathway cost analysis
DEFAULT_PRODUCTION_VOLUME_KG = float(os.getenv("LCA_PRODUCTION_VOLUME_KG", "1000"))

# Service
LOG_LEVEL = os.getenv("LCA_LOG_LEVEL", "INFO").upper()
API_PORT = int(os.getenv("LCA_API_PORT", "5000"))
DEBUG = os.getenv("LCA_DEBUG", "").lower() in ("1", "true", "yes")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level=None):
    """Configure root logging once for the service and the CLI demos."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
