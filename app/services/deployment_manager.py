"""
Deployment task manager for detached store deployments.

This module schedules deployment runs as background tasks that outlive the
request that created them, keeps strong references to them while they run,
records their outcome, and lets the lifespan wait for them on shutdown.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.utils.error_handler import log_error

logger = logging.getLogger(__name__)

MAX_HISTORY = 100

# Global deployment tracking
_active_deployments: Dict[asyncio.Task, Dict[str, Any]] = {}
_deployment_history: List[Dict[str, Any]] = []


def schedule_deployment(orchestrator, store_id: str, subdomain: str) -> asyncio.Task:
    """
    Start a deployment run without waiting for it.

    Must be called from a running event loop. Failures are recorded on the
    store by the orchestrator and logged here; they never reach the caller.

    Args:
        orchestrator: DeploymentOrchestrator instance
        store_id: Store identifier
        subdomain: Subdomain to provision

    Returns:
        asyncio.Task: The scheduled task
    """
    task = asyncio.create_task(orchestrator.run(store_id, subdomain), name=f"deploy-{store_id}")
    _active_deployments[task] = {
        "store_id": store_id,
        "subdomain": subdomain,
        "status": "running",
        "start_time": datetime.now(timezone.utc),
    }
    task.add_done_callback(_on_deployment_done)

    logger.info(f"Scheduled deployment for store {store_id} ({subdomain})")
    return task


def _on_deployment_done(task: asyncio.Task) -> None:
    deployment_info = _active_deployments.pop(task, None)
    if deployment_info is None:
        return

    end_time = datetime.now(timezone.utc)
    deployment_info.update(
        {
            "end_time": end_time,
            "duration_seconds": (end_time - deployment_info["start_time"]).total_seconds(),
        }
    )

    if task.cancelled():
        deployment_info.update({"status": "cancelled", "success": False})
        logger.warning(f"Deployment for store {deployment_info['store_id']} was cancelled")
    elif task.exception() is not None:
        error = task.exception()
        deployment_info.update({"status": "failed", "success": False, "error": str(error)})
        log_error(error, context={"store_id": deployment_info["store_id"], "operation": "deployment"})
    else:
        result = task.result()
        deployment_info.update({"status": "completed", "success": True, "url": result.url})

    _deployment_history.append(deployment_info)
    del _deployment_history[:-MAX_HISTORY]


def get_active_deployments() -> List[Dict[str, Any]]:
    """
    Get list of currently running deployments.

    Returns:
        List: Active deployment records
    """
    return list(_active_deployments.values())


def get_deployment_history() -> List[Dict[str, Any]]:
    """Finished deployments, oldest first, bounded to the last MAX_HISTORY."""
    return list(_deployment_history)


def get_deployment_status(store_id: str) -> Optional[Dict[str, Any]]:
    """
    Get tracking information for the latest deployment of a store.

    Args:
        store_id: Store identifier

    Returns:
        Dict: Deployment record or None if not found
    """
    for deployment_info in _active_deployments.values():
        if deployment_info["store_id"] == store_id:
            return deployment_info

    for deployment_info in reversed(_deployment_history):
        if deployment_info["store_id"] == store_id:
            return deployment_info

    return None


async def wait_for_active_deployments(timeout: float = 30.0) -> bool:
    """
    Wait for all running deployments to finish.

    Args:
        timeout: Maximum time to wait in seconds

    Returns:
        bool: True if nothing is left running
    """
    tasks = list(_active_deployments)
    if not tasks:
        return True

    logger.info(f"Waiting for {len(tasks)} active deployments to complete...")
    _, pending = await asyncio.wait(tasks, timeout=timeout)

    if pending:
        logger.warning(f"Timeout waiting for deployments to complete. {len(pending)} deployments still active.")
        return False

    logger.info("All deployments completed")
    return True


def get_deployment_statistics() -> Dict[str, Any]:
    """
    Get overall deployment statistics.

    Returns:
        Dict: Deployment statistics summary
    """
    total = len(_deployment_history)
    successful = len([d for d in _deployment_history if d.get("success", False)])

    return {
        "active_deployments": len(_active_deployments),
        "finished_deployments": total,
        "successful_deployments": successful,
        "failed_deployments": total - successful,
        "success_rate": (successful / total) * 100 if total else 0,
    }


def reset_deployment_tracking() -> None:
    """Forget all tracked deployments (tests)."""
    _active_deployments.clear()
    _deployment_history.clear()
