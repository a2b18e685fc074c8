from django.contrib import admin
from .models import Expense, ExpenseApproval

admin.site.register(Expense)
admin.site.register(ExpenseApproval)
