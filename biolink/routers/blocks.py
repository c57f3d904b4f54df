from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from biolink.core.database import get_db
from biolink.core.deps import get_current_user
from biolink.models.user import User
from biolink.models.page import Page
from biolink.models.block import Block
from biolink.schemas.block import BlockCreate, BlockUpdate, BlockResponse, BlockOrder
from biolink.services import block_service
from typing import List

router = APIRouter(prefix="/blocks", tags=["blocks"])

# champs qu'un null explicite ne doit pas écraser
_NOT_NULLABLE = ("type", "is_active", "is_visible")

def _get_owned_page(db: Session, page_id: int, user: User) -> Page:
    page = db.query(Page).filter(
        Page.id == page_id,
        Page.user_id == user.id
    ).first()
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return page

def _get_owned_block(db: Session, block_id: int, user: User) -> Block:
    block = db.query(Block).filter(
        Block.id == block_id,
        Block.user_id == user.id
    ).first()
    if not block:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Block not found")
    return block

@router.post("/pages/{page_id}/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(page_id: int, block_data: BlockCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Créer un block dans une page (ajouté en fin de page par défaut)"""
    _get_owned_page(db, page_id, current_user)
    block_service.check_block_allowed(db, current_user, page_id, block_data.type)

    position = block_data.position
    if position is None:
        position = block_service.next_position(db, page_id)

    new_block = Block(
        page_id=page_id,
        user_id=current_user.id,
        **block_data.model_dump(exclude={"position"}),
        position=position
    )
    db.add(new_block)
    db.commit()
    db.refresh(new_block)
    return new_block

@router.get("/pages/{page_id}/blocks", response_model=List[BlockResponse])
def list_blocks(page_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Récupérer tous les blocks d'une page, dans l'ordre d'affichage"""
    _get_owned_page(db, page_id, current_user)
    return block_service.list_page_blocks(db, page_id)

@router.put("/pages/{page_id}/order", response_model=List[BlockResponse])
def set_block_order(page_id: int, order: BlockOrder, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Réordonner tous les blocks d'une page (drag & drop)"""
    _get_owned_page(db, page_id, current_user)
    return block_service.reorder_blocks(db, page_id, order.block_ids)

@router.get("/{block_id}", response_model=BlockResponse)
def get_block(block_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_owned_block(db, block_id, current_user)

@router.put("/{block_id}", response_model=BlockResponse)
def update_block(block_id: int, block_data: BlockUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Modifier un block (partiel, null explicite efface la fenêtre de visibilité)"""
    block = _get_owned_block(db, block_id, current_user)
    updates = block_data.model_dump(exclude_unset=True)

    if updates.get("type") and updates["type"] != block.type:
        block_service.check_type_allowed(current_user, updates["type"])

    visible_from = updates.get("visible_from", block.visible_from)
    visible_to = updates.get("visible_to", block.visible_to)
    if visible_from and visible_to and visible_from > visible_to:
        raise HTTPException(status_code=422, detail="visible_from must be before visible_to")

    for field, value in updates.items():
        if value is None and field in _NOT_NULLABLE:
            continue
        setattr(block, field, value)

    db.commit()
    db.refresh(block)
    return block

@router.delete("/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(block_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Supprimer un block (hard delete)"""
    block = _get_owned_block(db, block_id, current_user)
    db.delete(block)
    db.commit()

@router.post("/{block_id}/reorder", response_model=List[BlockResponse])
def reorder_block(block_id: int, new_position: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Déplacer un block à un index donné, la page est renumérotée 0..n-1"""
    block = _get_owned_block(db, block_id, current_user)
    return block_service.move_block(db, block, new_position)
