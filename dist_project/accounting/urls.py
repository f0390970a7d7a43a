from django.urls import path
from . import views

app_name = "accounting"

urlpatterns = [
    # journal entries
    path("journals/", views.journal_list, name="journal-list"),
    path("journals/validate/", views.journal_validate, name="journal-validate"),
    path("journals/<int:pk>/", views.journal_detail, name="journal-detail"),
    path("journals/<int:pk>/post/", views.journal_post, name="journal-post"),
    path("journals/<int:pk>/reverse/", views.journal_reverse, name="journal-reverse"),
    # chart of accounts
    path("accounts/", views.account_list, name="account-list"),
    path("accounts/chart/", views.chart_of_accounts, name="chart-of-accounts"),
    path("accounts/<str:code>/", views.account_detail, name="account-detail"),
    path("accounts/<str:code>/balance/", views.account_balance, name="account-balance"),
    path("accounts/<str:code>/ledger/", views.account_ledger, name="account-ledger"),
    # party ledgers
    path("parties/", views.party_list, name="party-list"),
    path("parties/debtors-creditors/", views.debtors_creditors, name="debtors-creditors"),
    path("parties/aging/", views.aging_report, name="aging"),
    path("parties/<int:pk>/", views.party_detail, name="party-detail"),
    path("parties/<int:pk>/balance/", views.party_balance, name="party-balance"),
    path("parties/<int:pk>/ledger/", views.party_ledger, name="party-ledger"),
    # purchase bills & sales invoices
    path("purchases/", views.purchase_list, name="purchase-list"),
    path("purchases/<int:pk>/", views.purchase_detail, name="purchase-detail"),
    path("purchases/<int:pk>/pay/", views.purchase_pay, name="purchase-pay"),
    path("sales/", views.sale_list, name="sale-list"),
    path("sales/<int:pk>/", views.sale_detail, name="sale-detail"),
    path("sales/<int:pk>/receive/", views.sale_receive, name="sale-receive"),
    # sales & purchase returns
    path("sales-returns/", views.sales_return_list, name="sales-return-list"),
    path("sales-returns/<int:pk>/", views.sales_return_detail, name="sales-return-detail"),
    path("sales-returns/<int:pk>/process/", views.sales_return_process, name="sales-return-process"),
    path("purchase-returns/", views.purchase_return_list, name="purchase-return-list"),
    path("purchase-returns/<int:pk>/", views.purchase_return_detail, name="purchase-return-detail"),
    path("purchase-returns/<int:pk>/process/", views.purchase_return_process,
         name="purchase-return-process"),
    # reports
    path("reports/trial-balance/", views.trial_balance_report, name="trial-balance"),
    path("reports/balance-sheet/", views.balance_sheet_report, name="balance-sheet"),
    path("reports/vat/", views.vat_report, name="vat-report"),
    path("reports/register/", views.register_report, name="register-report"),
]
