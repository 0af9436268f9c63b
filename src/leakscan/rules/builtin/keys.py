"""Private keys — PEM blocks in content and key files by name or path."""

from leakscan.rules.allowlist import Allowlist
from leakscan.rules.models import Rule

PRIVATE_KEY = Rule(
    id="private-key",
    description="PEM-encoded private key header",
    regex=r"-----BEGIN (?:[A-Z]+ )*PRIVATE KEY(?: BLOCK)?-----",
    tags=("key",),
)

PKCS12_FILE = Rule(
    id="pkcs12-file",
    description="PKCS#12 certificate bundle",
    file=r"(?i)\.(?:p12|pfx)$",
    tags=("key", "file"),
)

SSH_KEY_FILE = Rule(
    id="ssh-private-key-file",
    description="SSH private key file",
    file=r"^id_(?:rsa|dsa|ecdsa|ed25519)$",
    tags=("key", "file"),
)

ENV_FILE = Rule(
    id="dotenv-file",
    description="Committed .env file",
    file=r"^\.env(?:\..+)?$",
    allowlist=Allowlist.from_dict({"files": [r"\.(?:example|sample|template)$"]}),
    tags=("config", "file"),
)

KUBE_CONFIG = Rule(
    id="kubeconfig-file",
    description="Kubernetes client configuration",
    path=r"(?:^|/)\.kube/config$",
    tags=("config", "file"),
)

ALL_KEY_RULES = [PRIVATE_KEY, PKCS12_FILE, SSH_KEY_FILE, ENV_FILE, KUBE_CONFIG]
