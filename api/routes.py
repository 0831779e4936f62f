"""FastAPI routes for interview session control."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.schemas import (
    AnswerReq,
    ApiResp,
    ConnectionData,
    EndData,
    ReportView,
    SessionSummary,
    StartData,
    StartReq,
    StatsData,
    StatusData,
)
from interview_session import InterviewConfig
from services import InterviewEngine, TurnResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_engine(request: Request) -> InterviewEngine:
    return request.app.state.engine


@router.post("/interviews/start", status_code=201, response_model=ApiResp[StartData])
async def start_interview(req: StartReq, engine: InterviewEngine = Depends(get_engine)) -> ApiResp[StartData]:
    logger.info("Starting new interview: %s - %s", req.role, req.level)
    config = InterviewConfig(role=req.role, level=req.level, topics=req.topics)
    session, question = await engine.start_interview(config)
    return ApiResp[StartData](data=StartData(session_id=session.session_id, question=question))


@router.post("/interviews/{session_id}/answer", response_model=ApiResp[TurnResult])
async def submit_answer(
    session_id: str,
    req: AnswerReq,
    engine: InterviewEngine = Depends(get_engine),
) -> ApiResp[TurnResult]:
    logger.info("Answer submitted for session: %s", session_id)
    result = await engine.evaluate_and_generate_next(session_id, req.answer, req.audio_metadata)
    return ApiResp[TurnResult](data=result)


@router.post("/interviews/{session_id}/end", response_model=ApiResp[EndData])
async def end_interview(session_id: str, engine: InterviewEngine = Depends(get_engine)) -> ApiResp[EndData]:
    logger.info("Ending interview session: %s", session_id)
    report = await engine.generate_final_report(session_id)
    return ApiResp[EndData](data=EndData(report_id=report.report_id, report=report))


@router.get("/interviews/{session_id}/status", response_model=ApiResp[StatusData])
async def session_status(session_id: str, engine: InterviewEngine = Depends(get_engine)) -> ApiResp[StatusData]:
    session = await engine.session_status(session_id)
    return ApiResp[StatusData](data=StatusData.from_session(session))


@router.get("/reports/{report_id}", response_model=ApiResp[ReportView])
async def get_report(report_id: str, engine: InterviewEngine = Depends(get_engine)) -> ApiResp[ReportView]:
    report, session = await engine.report_with_session(report_id)
    summary = SessionSummary.from_session(session) if session is not None else None
    view = ReportView(**report.model_dump(), session=summary)
    return ApiResp[ReportView](data=view)


@router.get("/health/ollama", response_model=ApiResp[ConnectionData])
async def provider_health(engine: InterviewEngine = Depends(get_engine)) -> ApiResp[ConnectionData]:
    status = await engine.gateway.test_connection()
    return ApiResp[ConnectionData](data=ConnectionData(**status.as_dict()))


@router.get("/stats", response_model=ApiResp[StatsData])
async def stats(engine: InterviewEngine = Depends(get_engine)) -> ApiResp[StatsData]:
    counts = engine.store.stats()
    return ApiResp[StatsData](
        data=StatsData(active_sessions=counts["activeSessions"], reports_stored=counts["reportsStored"])
    )
