# Import every model so Base.metadata and relationship() lookups see all tables
from evensplit.db.session import Base
from evensplit.models.user import User
from evensplit.models.group import Group
from evensplit.models.group_member import GroupMember
from evensplit.models.group_invitation import GroupInvitation
from evensplit.models.friendship import Friendship
from evensplit.models.expense import Expense
from evensplit.models.expense_split import ExpenseSplit
from evensplit.models.expense_payment import ExpensePayment
from evensplit.models.expense_history import ExpenseHistory
from evensplit.models.expense_comment import ExpenseComment

__all__ = [
    "Base", "User", "Group", "GroupMember", "GroupInvitation", "Friendship",
    "Expense", "ExpenseSplit", "ExpensePayment", "ExpenseHistory", "ExpenseComment",
]
