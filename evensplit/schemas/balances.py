from decimal import Decimal
from typing import Dict, List
from pydantic import BaseModel

class TransferOut(BaseModel):
    from_id: int
    from_name: str | None = None
    to_id: int
    to_name: str | None = None
    amount: Decimal

class GroupBalanceOut(BaseModel):
    net: Dict[int, Decimal]
    settlements: List[TransferOut]

class UserBalanceOut(BaseModel):
    user_id: int
    net_balance: Decimal
    you_owe: List[TransferOut]
    owed_to_you: List[TransferOut]
