from django.urls import path, include
from rest_framework.routers import DefaultRouter

# --- Import DRF API Views ---
from .views import coa as coa_views
from .views.balance_sheet import BalanceSheetView
from .views.trial_balance import TrialBalanceView

# --- Router Setup ---
router = DefaultRouter()
router.register(r'accounts', coa_views.AccountViewSet, basename='account-api')

app_name = 'crp_accounting_api'

# --- URL Patterns ---
urlpatterns = [
    path('', include(router.urls)),
    path('reports/trial-balance/', TrialBalanceView.as_view(), name='api_report_trial_balance'),
    path('reports/balance-sheet/', BalanceSheetView.as_view(), name='api_report_balance_sheet'),
]
