"""Dependency injection singletons for Marbles-Engine."""

from marbles_engine.chaincode.dispatcher import MarblesChaincode
from marbles_engine.chaincode.service import InvocationService
from marbles_engine.common.config import get_settings
from marbles_engine.common.database import DatabaseManager
from marbles_engine.directory.service import DirectoryService
from marbles_engine.lifecycle.service import LifecycleService
from marbles_engine.workflow.service import WorkflowService

_db: DatabaseManager | None = None
_directory: DirectoryService | None = None
_lifecycle: LifecycleService | None = None
_workflow: WorkflowService | None = None
_chaincode: MarblesChaincode | None = None
_invocation: InvocationService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_directory_service() -> DirectoryService:
    global _directory
    if _directory is None:
        _directory = DirectoryService(get_settings())
    return _directory


def get_lifecycle_service() -> LifecycleService:
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = LifecycleService(get_settings())
    return _lifecycle


def get_workflow_service() -> WorkflowService:
    global _workflow
    if _workflow is None:
        _workflow = WorkflowService(get_settings(), get_directory_service())
    return _workflow


def get_chaincode() -> MarblesChaincode:
    global _chaincode
    if _chaincode is None:
        _chaincode = MarblesChaincode(
            get_settings(),
            lifecycle=get_lifecycle_service(),
            workflow=get_workflow_service(),
            directory=get_directory_service(),
        )
    return _chaincode


def get_invocation_service() -> InvocationService:
    global _invocation
    if _invocation is None:
        _invocation = InvocationService(get_settings(), get_chaincode())
    return _invocation


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _directory, _lifecycle, _workflow, _chaincode, _invocation
    _db = None
    _directory = None
    _lifecycle = None
    _workflow = None
    _chaincode = None
    _invocation = None
