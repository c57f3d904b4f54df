"""Block service - quotas, positions et réordonnancement"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List
from biolink.core.errors import InvalidOrderError, PlanLimitError
from biolink.models.block import Block, FREE_BLOCK_TYPES
from biolink.models.user import User

FREE_MAX_BLOCKS = 15


def list_page_blocks(db: Session, page_id: int) -> List[Block]:
    return db.query(Block).filter(Block.page_id == page_id).order_by(Block.position, Block.id).all()


def check_type_allowed(user: User, block_type: str) -> None:
    if not user.is_pro and block_type not in FREE_BLOCK_TYPES:
        raise PlanLimitError(f"Block type '{block_type}' requires the Pro plan")


def check_block_allowed(db: Session, user: User, page_id: int, block_type: str) -> None:
    # plan Free: 6 types de blocks et 15 blocks par page
    check_type_allowed(user, block_type)
    if user.is_pro:
        return
    count = db.query(Block).filter(Block.page_id == page_id).count()
    if count >= FREE_MAX_BLOCKS:
        raise PlanLimitError(f"Free plan is limited to {FREE_MAX_BLOCKS} blocks per page")


def next_position(db: Session, page_id: int) -> int:
    current_max = db.query(func.max(Block.position)).filter(Block.page_id == page_id).scalar()
    return 0 if current_max is None else current_max + 1


def reorder_blocks(db: Session, page_id: int, block_ids: List[int]) -> List[Block]:
    """
    Applique un nouvel ordre complet (drag & drop).

    block_ids doit contenir exactement les blocks de la page.
    Les positions sont réécrites en 0..n-1.
    """
    blocks = list_page_blocks(db, page_id)
    by_id = {block.id: block for block in blocks}

    if set(block_ids) != set(by_id) or len(block_ids) != len(by_id):
        raise InvalidOrderError("block_ids must list every block of the page exactly once")

    for position, block_id in enumerate(block_ids):
        by_id[block_id].position = position

    db.commit()
    return list_page_blocks(db, page_id)


def move_block(db: Session, block: Block, new_position: int) -> List[Block]:
    """Déplace un block à l'index donné et renumérote la page"""
    ordered = [b for b in list_page_blocks(db, block.page_id) if b.id != block.id]
    index = max(0, min(new_position, len(ordered)))
    ordered.insert(index, block)

    for position, b in enumerate(ordered):
        b.position = position

    db.commit()
    return list_page_blocks(db, block.page_id)
