"""
Search API endpoints for hybrid retrieval over the textbook and journal
article corpora.
"""
import logging
import time
from typing import List

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_backends,
    get_db,
    get_query_expander,
    get_session_gate,
    get_usage_logger,
)
from src.config import get_settings
from src.models.schemas import ErrorResponse, SearchRequest, SearchResultItem
from src.search.corpora import CorpusProfile, sci_profile, textbook_profile
from src.search.exceptions import AuthenticationError, CitationRecordMissingError, SearchError
from src.search.filters import SearchFilter
from src.search.query_expansion import QueryExpander
from src.services.auth_service import SessionGate
from src.services.search_service import SearchBackends, SearchService
from src.services.usage_log import UsageLogger

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_RESPONSES = {
    200: {"description": "Merged passages with citations"},
    401: {"description": "Authentication failed", "model": ErrorResponse},
    400: {"description": "Invalid request parameters", "model": ErrorResponse},
    500: {"description": "Citation record missing or internal error", "model": ErrorResponse},
    502: {"description": "A search backend failed", "model": ErrorResponse},
}


async def run_search(
    corpus: CorpusProfile,
    request: SearchRequest,
    email: str,
    password: str,
    db: AsyncSession,
    backends: SearchBackends,
    session_gate: SessionGate,
    query_expander: QueryExpander,
    usage_logger: UsageLogger,
) -> List[SearchResultItem]:
    """
    Authenticate, expand the question and search one corpus.

    Any failure aborts the request; partial result lists are never returned.
    """
    try:
        await session_gate.ensure_authenticated(email, password)
        usage_logger.record(email, int(time.time() * 1000), corpus.name, request.top_k)

        expanded = await query_expander.expand(request.query)

        service = SearchService(
            backends,
            corpus,
            journal_batch_size=get_settings().journal_lookup_batch_size,
        )
        return await service.search(
            semantic_query=expanded.semantic_query,
            keyword_queries=expanded.keyword_queries,
            top_k=request.top_k,
            ext_k=request.ext_k,
            search_filter=SearchFilter.from_request(request.filter, request.range_filters()),
            db=db,
        )

    except AuthenticationError as e:
        logger.warning(f"Authentication failed for {email}: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))

    except CitationRecordMissingError as e:
        logger.error(f"{corpus.name} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    except SearchError as e:
        logger.error(f"{corpus.name} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    except ValueError as e:
        logger.warning(f"Invalid search request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    except Exception as e:
        logger.error(f"Search request failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing your search request",
        )


@router.post(
    "/textbook",
    response_model=List[SearchResultItem],
    status_code=status.HTTP_200_OK,
    summary="Search textbooks",
    description="Hybrid vector + keyword search over textbook chunks, cited by ISBN and page",
    responses=SEARCH_RESPONSES,
)
async def search_textbooks(
    request: SearchRequest,
    email: str = Header(default=""),
    password: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
    backends: SearchBackends = Depends(get_backends),
    session_gate: SessionGate = Depends(get_session_gate),
    query_expander: QueryExpander = Depends(get_query_expander),
    usage_logger: UsageLogger = Depends(get_usage_logger),
) -> List[SearchResultItem]:
    """
    Search textbook chunks.

    **Example Request:**
    ```json
    {
        "query": "What characterises global trade in critical metals?",
        "filter": {"rec_id": ["tb-001"]},
        "datefilter": {"publication_date": {"gte": 1600000000}},
        "topK": 3,
        "extK": 1
    }
    ```

    **Example Response:**
    ```json
    [
        {
            "content": "...",
            "source": "Industrial Ecology(ISBN: 978-0-13-046713-5), Graedel. 2023-11-14(P12). "
        }
    ]
    ```
    """
    return await run_search(
        textbook_profile(get_settings()),
        request,
        email,
        password,
        db,
        backends,
        session_gate,
        query_expander,
        usage_logger,
    )


@router.post(
    "/sci",
    response_model=List[SearchResultItem],
    status_code=status.HTTP_200_OK,
    summary="Search journal articles",
    description="Hybrid vector + keyword search over journal article chunks, cited by DOI",
    responses=SEARCH_RESPONSES,
)
async def search_journal_articles(
    request: SearchRequest,
    email: str = Header(default=""),
    password: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
    backends: SearchBackends = Depends(get_backends),
    session_gate: SessionGate = Depends(get_session_gate),
    query_expander: QueryExpander = Depends(get_query_expander),
    usage_logger: UsageLogger = Depends(get_usage_logger),
) -> List[SearchResultItem]:
    """
    Search journal article chunks.

    Every passage is cited from the journals table; if any DOI has no record
    the whole request fails.

    **Example Request:**
    ```json
    {
        "query": "关键金属物质流的全球贸易特征是什么?",
        "filter": {"journal": ["JOURNAL OF INDUSTRIAL ECOLOGY"]},
        "topK": 3
    }
    ```
    """
    return await run_search(
        sci_profile(get_settings()),
        request,
        email,
        password,
        db,
        backends,
        session_gate,
        query_expander,
        usage_logger,
    )
