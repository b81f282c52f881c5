import io

import factory
import factory.fuzzy
from openpyxl import Workbook

import tradelog.models as models
from tradelog.columns import IMPORT_COLUMN_COUNT, IMPORT_HEADERS, SHEET_COLUMNS


class CustomerFactory(factory.alchemy.SQLAlchemyModelFactory):
    company_name = factory.Sequence(lambda n: 'Company %s' % n)
    business_opportunity = factory.Faker('sentence')

    class Meta:
        model = models.Customer
        sqlalchemy_session_persistence = 'flush'


class OrderFactory(factory.alchemy.SQLAlchemyModelFactory):
    customer = factory.SubFactory(CustomerFactory)
    company_name = factory.SelfAttribute('customer.company_name')
    order_date = factory.Faker('date_object')
    payment_date = factory.SelfAttribute('order_date')
    lead_number = factory.Sequence(lambda n: 'LEAD%04d' % n)
    closed_product = factory.Faker('word')
    contact_info = factory.List([
        factory.Dict({
            'name': factory.Faker('name'),
            'email': factory.Faker('email'),
            'phone': factory.Faker('phone_number'),
        })
    ])
    new_or_old = factory.fuzzy.FuzzyChoice(models.CUSTOMER_FLAGS)
    country = factory.Faker('country')
    continent = factory.fuzzy.FuzzyChoice(['Asia', 'Europe', 'North America'])
    source = factory.fuzzy.FuzzyChoice(['Website', 'Trade show', 'Referral'])
    invoice_amount = factory.fuzzy.FuzzyFloat(100.0, 10000.0)
    payment_amount = factory.fuzzy.FuzzyFloat(100.0, 10000.0)

    class Meta:
        model = models.Order
        sqlalchemy_session_persistence = 'flush'


# =============================================================================
# Sheet builders
# =============================================================================

# import-only columns without a stored field
UNBACKED_POSITIONS = {
    'invoice_number': 16,
    'shipment_date': 18,
    'tracking_number': 19,
    'payment_proof': 20,
}


def sheet_row(**values):
    """Build a 21-cell import row from field names."""
    cells = [None] * IMPORT_COLUMN_COUNT
    positions = {c.field: c.position for c in SHEET_COLUMNS if c.field}
    positions.update(UNBACKED_POSITIONS)
    for name, value in values.items():
        cells[positions[name]] = value
    return cells


def valid_row(**overrides):
    values = dict(
        lead_number='LEAD001',
        company_name='ABC',
        closed_product='P1',
        payment_date='2024-01-15',
    )
    values.update(overrides)
    return sheet_row(**values)


def workbook_with(rows, header=IMPORT_HEADERS):
    """Build an in-memory .xlsx whose first sheet holds the header and rows."""
    wb = Workbook()
    ws = wb.active
    if header is not None:
        ws.append(list(header))
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
