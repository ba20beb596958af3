import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kasir.api.deps import require_api_key
from kasir.database import get_db
from kasir.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
    StoreFailureError,
)
from kasir.schemas.checkout import CheckoutRequest, TransactionResponse
from kasir.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_key)],
    summary="Checkout a basket",
    description="""
    Sell every line of the basket in one atomic transaction.

    Stock is checked and decremented line by line under a row lock.
    If any line fails, nothing is written: stock stays as it was and
    no transaction is recorded.
    """
)
def checkout(
    request: CheckoutRequest,
    db: Session = Depends(get_db)
):
    """
    Checkout a basket.

    - **items**: ordered list of `{product_id, quantity}` lines
    """
    service = CheckoutService(db)

    try:
        transaction = service.checkout(request.items)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (InsufficientStockError, InvalidInputError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreFailureError as e:
        logger.error(f"Checkout failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Checkout could not be completed, please retry"
        )

    logger.info(
        f"Transaction #{transaction.id} committed: {len(request.items)} line(s), "
        f"total {transaction.total_amount}"
    )
    return transaction
