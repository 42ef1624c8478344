# zkLogin client
from zklogin.client.client import ZkLoginClient as ZkLoginClient
from zklogin.client.orchestrator import LoginOrchestrator as LoginOrchestrator
from zklogin.client.orchestrator import LoginState as LoginState
from zklogin.client.session_manager import SessionManager as SessionManager
from zklogin.client.signer import SignatureAssembler as SignatureAssembler

__all__ = [
    "LoginOrchestrator",
    "LoginState",
    "SessionManager",
    "SignatureAssembler",
    "ZkLoginClient",
]
