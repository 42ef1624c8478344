# zkLogin: OAuth login to a ledger account via an ephemeral key and a ZK proof

from zklogin.client.client import ZkLoginClient
from zklogin.client.orchestrator import LoginOrchestrator, LoginState
from zklogin.client.signer import SignatureAssembler

__all__ = [
    "LoginOrchestrator",
    "LoginState",
    "SignatureAssembler",
    "ZkLoginClient",
]
