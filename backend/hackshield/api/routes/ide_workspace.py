"""IDE Workspace Routes — shared files, emulated branches, code execution, terminal,
static previews, deployments and the coding assistant.

Invariants:
    - Every editor endpoint resolves access_id to a non-disqualified participant or team
    - "main" always exists once any branch exists and can never be deleted
    - Feature branches start with a copy of main's files and their own credentials
    - Terminal requests always answer 200 with {output}, even when refused
    - The assistant is refused (403) when the hackathon's AI level is strict

Design Decisions:
    - Branches are JSON lists on one row per branch (core.branch_ops): no real VCS
    - Filesystem writes for previews/deployments run in a worker thread
    - Runners and the assistant are dependencies so tests can swap them
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    IDEPrincipal, get_current_user, get_hackathon_or_404, resolve_ide_principal,
)
from hackshield.api.serializers import branch_dict
from hackshield.config import get_settings
from hackshield.core.branch_ops import (
    BRANCH_ACTIONS, MAIN_BRANCH, add_commit, add_pull_request, mark_pull_request_merged,
    merge_into_main,
)
from hackshield.core.credentials import generate_branch_credentials
from hackshield.core.domain_types import (
    ActivitySeverity, ActivityType, AIAssistanceLevel, BranchType,
)
from hackshield.core.errors import (
    BusinessRuleError, ErrorContext, ResourceNotFoundError, ValidationFailedError,
)
from hackshield.core.time_utils import isoformat, utc_now
from hackshield.core.workspace_files import file_problem, sanitize_file_name, upsert_file
from hackshield.infrastructure.database import get_db
from hackshield.models.hackathon import Hackathon
from hackshield.models.user import User
from hackshield.models.workspace import ActivityLog, Branch, TeamWorkspace
from hackshield.schemas.ide import (
    AssistantRequest, BranchCreate, BranchUpdate, DeployRequest, ExecuteRequest,
    PreviewRequest, TeamFileSave, TerminalRequest,
)
from hackshield.services.assistant import CodingAssistant, get_assistant
from hackshield.services.code_runner import CodeRunner, get_code_runner
from hackshield.services.static_sites import site_exists, write_site
from hackshield.services.terminal_runner import TerminalRunner, get_terminal_runner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["ide-workspace"])
ai_router = APIRouter(prefix="/api/v1/ai", tags=["ide-workspace"])


async def _principal(hackathon_id: UUID, access_id: str, db: AsyncSession) -> IDEPrincipal:
    await get_hackathon_or_404(hackathon_id, db)
    return await resolve_ide_principal(hackathon_id, access_id, db)


def _record(
    db: AsyncSession, hackathon_id: UUID, principal: IDEPrincipal,
    type: ActivityType, details: str, extra: dict | None = None,
) -> None:
    db.add(ActivityLog(
        hackathon_id=hackathon_id,
        team_id=principal.team_key,
        team_name=principal.display_name,
        participant_name=principal.participant.name if principal.participant else None,
        type=type.value,
        details=details,
        extra=extra or {},
        severity=ActivitySeverity.INFO.value,
    ))


# ─── Team files ──────────────────────────────────────────────────

async def _workspace(hackathon_id: UUID, access_id: str, db: AsyncSession) -> TeamWorkspace | None:
    return (await db.execute(
        select(TeamWorkspace).where(
            TeamWorkspace.hackathon_id == hackathon_id, TeamWorkspace.access_id == access_id,
        ),
    )).scalar_one_or_none()


@router.get("/{hackathon_id}/team-files")
async def get_team_files(
    hackathon_id: UUID,
    access_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, access_id, db)
    workspace = await _workspace(hackathon_id, access_id, db)
    if workspace is None:
        return {"files": [], "last_sync": None}
    return {"files": workspace.files, "last_sync": isoformat(workspace.last_sync)}


@router.post("/{hackathon_id}/team-files")
async def save_team_file(
    hackathon_id: UUID,
    body: TeamFileSave,
    db: AsyncSession = Depends(get_db),
):
    principal = await _principal(hackathon_id, body.access_id, db)
    file = body.file.model_dump(exclude_none=True)
    problem = file_problem(file, get_settings().max_workspace_file_bytes)
    if problem:
        raise ValidationFailedError(problem, field="file")

    now = utc_now()
    workspace = await _workspace(hackathon_id, body.access_id, db)
    if workspace is None:
        workspace = TeamWorkspace(hackathon_id=hackathon_id, access_id=body.access_id, files=[])
        db.add(workspace)
    workspace.files = upsert_file(workspace.files, file, now)
    workspace.last_sync = now
    _record(db, hackathon_id, principal, ActivityType.SAVE, f"Saved {sanitize_file_name(file['name'])}")
    await db.commit()
    return {"success": True, "files": workspace.files, "last_sync": isoformat(workspace.last_sync)}


# ─── Branches ────────────────────────────────────────────────────

async def _branch(
    hackathon_id: UUID, access_id: str, branch_name: str, db: AsyncSession,
) -> Branch | None:
    return (await db.execute(
        select(Branch).where(
            Branch.hackathon_id == hackathon_id,
            Branch.access_id == access_id,
            Branch.branch_name == branch_name,
        ),
    )).scalar_one_or_none()


async def _branch_or_404(
    hackathon_id: UUID, access_id: str, branch_name: str, db: AsyncSession,
) -> Branch:
    branch = await _branch(hackathon_id, access_id, branch_name, db)
    if branch is None:
        raise ResourceNotFoundError("Branch", branch_name)
    return branch


@router.get("/{hackathon_id}/branches")
async def list_branches(
    hackathon_id: UUID,
    access_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, access_id, db)
    rows = (await db.execute(
        select(Branch)
        .where(Branch.hackathon_id == hackathon_id, Branch.access_id == access_id)
        .order_by(Branch.created_at.asc()),
    )).scalars().all()
    return {"branches": [branch_dict(b) for b in rows]}


@router.post("/{hackathon_id}/branches", status_code=status.HTTP_201_CREATED)
async def create_branch(
    hackathon_id: UUID,
    body: BranchCreate,
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, body.access_id, db)
    main = await _branch(hackathon_id, body.access_id, MAIN_BRANCH, db)
    if main is None:
        main = Branch(
            hackathon_id=hackathon_id,
            access_id=body.access_id,
            branch_name=MAIN_BRANCH,
            branch_type=BranchType.MAIN.value,
            created_by=body.created_by,
        )
        db.add(main)
        if body.branch_name == MAIN_BRANCH:
            await db.commit()
            return {"success": True, "branch": branch_dict(main)}
    elif body.branch_name == MAIN_BRANCH or await _branch(
        hackathon_id, body.access_id, body.branch_name, db,
    ) is not None:
        raise BusinessRuleError(
            f"Branch '{body.branch_name}' already exists", code="BRANCH_EXISTS",
            context=ErrorContext(access_id=body.access_id),
        )

    branch_access_id, branch_password = generate_branch_credentials(body.access_id)
    branch = Branch(
        hackathon_id=hackathon_id,
        access_id=body.access_id,
        branch_name=body.branch_name,
        branch_type=BranchType.FEATURE.value,
        created_by=body.created_by,
        assigned_to=body.assigned_to,
        assigned_to_email=body.assigned_to_email,
        branch_access_id=branch_access_id,
        branch_access_password=branch_password,
        files=list(main.files or []),
    )
    db.add(branch)
    await db.commit()

    logger.info(f"Branch '{body.branch_name}' created", extra={"access_id": body.access_id})
    return {"success": True, "branch": branch_dict(branch, include_credentials=True)}


@router.put("/{hackathon_id}/branches")
async def update_branch(
    hackathon_id: UUID,
    body: BranchUpdate,
    db: AsyncSession = Depends(get_db),
):
    principal = await _principal(hackathon_id, body.access_id, db)
    if body.action not in BRANCH_ACTIONS:
        raise ValidationFailedError(
            f"Unknown action '{body.action}'. Expected one of: {', '.join(BRANCH_ACTIONS)}",
            field="action",
        )
    branch = await _branch_or_404(hackathon_id, body.access_id, body.branch_name, db)
    data = body.data
    author = data.get("author") or principal.display_name
    now = utc_now()
    result: dict = {}

    if body.action == "commit":
        if not data.get("message"):
            raise ValidationFailedError("Commit message is required", field="data.message")
        if data.get("files") is not None:
            branch.files = data["files"]
        branch.commits = add_commit(
            branch.commits, data["message"], author, data.get("files_changed"), now,
        )
        result["commit"] = branch.commits[-1]

    elif body.action == "update_files":
        branch.files = data.get("files") or []

    elif body.action == "create_pr":
        branch.pull_requests, result["pull_request"] = add_pull_request(
            branch.pull_requests,
            data.get("title") or f"Merge {branch.branch_name} into {MAIN_BRANCH}",
            data.get("description"), author, now,
        )

    elif body.action == "merge":
        if branch.branch_name == MAIN_BRANCH:
            raise BusinessRuleError("Cannot merge main into itself", code="INVALID_MERGE")
        main = await _branch_or_404(hackathon_id, body.access_id, MAIN_BRANCH, db)
        main.files, main.commits = merge_into_main(
            main.files, main.commits, branch.branch_name, branch.files, author, now,
        )
        branch.pull_requests = mark_pull_request_merged(branch.pull_requests, data.get("pr_id"), now)
        result["main"] = branch_dict(main)

    branch.updated_at = now
    await db.commit()
    return {"success": True, "action": body.action, "branch": branch_dict(branch), **result}


@router.delete("/{hackathon_id}/branches")
async def delete_branch(
    hackathon_id: UUID,
    access_id: str = Query(..., min_length=1),
    branch_name: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, access_id, db)
    if branch_name == MAIN_BRANCH:
        raise BusinessRuleError("The main branch cannot be deleted", code="MAIN_BRANCH_PROTECTED")
    branch = await _branch_or_404(hackathon_id, access_id, branch_name, db)
    await db.delete(branch)
    await db.commit()
    return {"success": True, "message": f"Branch '{branch_name}' deleted"}


# ─── Execution ───────────────────────────────────────────────────

@router.post("/{hackathon_id}/execute-code")
async def execute_code(
    hackathon_id: UUID,
    body: ExecuteRequest,
    db: AsyncSession = Depends(get_db),
    runner: CodeRunner = Depends(get_code_runner),
):
    principal = await _principal(hackathon_id, body.access_id, db)
    result = await runner.run(body.access_id, body.language.lower(), body.code, body.file_name)
    _record(
        db, hackathon_id, principal, ActivityType.EXECUTE,
        f"Executed {body.language} code", {"success": result.success},
    )
    await db.commit()
    return result.to_dict()


@router.post("/{hackathon_id}/terminal")
async def terminal(
    hackathon_id: UUID,
    body: TerminalRequest,
    db: AsyncSession = Depends(get_db),
    runner: TerminalRunner = Depends(get_terminal_runner),
):
    principal = await _principal(hackathon_id, body.access_id, db)
    output = await runner.execute(body.access_id, body.command)
    _record(db, hackathon_id, principal, ActivityType.TERMINAL_COMMAND, body.command[:200])
    await db.commit()
    return {"output": output}


# ─── Preview & deploy ────────────────────────────────────────────

def _site_url(mount: str, access_id: str) -> str:
    return f"{get_settings().public_base_url}/{mount}/{sanitize_file_name(access_id)}/index.html"


@router.post("/{hackathon_id}/preview")
async def preview(
    hackathon_id: UUID,
    body: PreviewRequest,
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, body.access_id, db)
    files = [f.model_dump() for f in body.files]
    bundle = await asyncio.to_thread(
        write_site, get_settings().preview_root, body.access_id, files, True,
    )
    return {
        "success": True,
        "preview_url": _site_url("previews", body.access_id),
        "files": bundle.files,
    }


@router.post("/{hackathon_id}/deploy", status_code=status.HTTP_201_CREATED)
async def deploy(
    hackathon_id: UUID,
    body: DeployRequest,
    db: AsyncSession = Depends(get_db),
):
    principal = await _principal(hackathon_id, body.access_id, db)
    files = [f.model_dump() for f in body.files]
    bundle = await asyncio.to_thread(
        write_site, get_settings().deployment_root, body.access_id, files, True,
    )
    logger.info("Project deployed", extra={"hackathon_id": hackathon_id, "access_id": body.access_id})
    return {
        "success": True,
        "deployment": {
            "project_name": body.project_name,
            "deployment_type": body.deployment_type,
            "team": principal.display_name,
            "url": _site_url("deployments", body.access_id),
            "status": "deployed",
            "files": bundle.files,
            "deployed_at": utc_now().isoformat(),
        },
    }


@router.get("/{hackathon_id}/deploy")
async def deployment_status(
    hackathon_id: UUID,
    access_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    await _principal(hackathon_id, access_id, db)
    root = get_settings().deployment_root
    if not site_exists(root, access_id):
        return {"status": "not_deployed", "url": None, "deployed_at": None}
    site_dir = Path(root) / sanitize_file_name(access_id)
    deployed_at = datetime.fromtimestamp(site_dir.stat().st_mtime, tz=timezone.utc)
    return {
        "status": "deployed",
        "url": _site_url("deployments", access_id),
        "deployed_at": deployed_at.isoformat(),
    }


# ─── Assistant ───────────────────────────────────────────────────

async def _ask(
    hackathon: Hackathon | None, body: AssistantRequest, assistant: CodingAssistant,
) -> dict:
    level = AIAssistanceLevel(hackathon.ai_assistance_level) if hackathon else AIAssistanceLevel.MODERATE
    return await assistant.answer(
        body.query, body.context, level,
        prohibited=hackathon.prohibited_technologies if hackathon else None,
        hackathon_id=str(hackathon.id) if hackathon else None,
    )


@router.post("/{hackathon_id}/ai-assistant")
async def ai_assistant(
    hackathon_id: UUID,
    body: AssistantRequest,
    db: AsyncSession = Depends(get_db),
    assistant: CodingAssistant = Depends(get_assistant),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    principal = None
    if body.access_id:
        principal = await resolve_ide_principal(hackathon_id, body.access_id, db)
    answer = await _ask(hackathon, body, assistant)
    if principal is not None:
        _record(db, hackathon_id, principal, ActivityType.AI_QUERY, body.query[:200])
        await db.commit()
    return answer


@ai_router.post("/chat")
async def ai_chat(
    body: AssistantRequest,
    hackathon_id: UUID | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    assistant: CodingAssistant = Depends(get_assistant),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db) if hackathon_id else None
    return await _ask(hackathon, body, assistant)
