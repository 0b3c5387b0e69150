from fastapi import APIRouter, Response, status

router = APIRouter()


@router.get("/health_check", summary="Liveness check")
def health_check() -> Response:
    """Always 200 with an empty body while the process is serving."""
    return Response(status_code=status.HTTP_200_OK)
