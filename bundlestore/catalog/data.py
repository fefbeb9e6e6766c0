# module bundlestore.catalog.data
"""
Offres proposées à la vente, regroupées par opérateur.
Les prix sont en unité majeure (GH₵); la conversion en unité mineure se fait au checkout.
"""
from decimal import Decimal
from .models import Bundle, Provider

def _b(id: str, data_amount: str, validity: str, price: str) -> Bundle:
    return Bundle(id=id, name=f"{data_amount} Bundle", data_amount=data_amount, validity=validity, price=Decimal(price))

PROVIDERS = [
    Provider(
        id="mtn",
        name="MTN",
        logo="/static/logos/mtn.png",
        color="#FFCC00",
        bundles=[
            _b("mtn-1gb", "1GB", "No expiry", "6.00"),
            _b("mtn-2gb", "2GB", "No expiry", "11.50"),
            _b("mtn-5gb", "5GB", "No expiry", "27.00"),
            _b("mtn-10gb", "10GB", "No expiry", "52.00"),
            _b("mtn-20gb", "20GB", "No expiry", "100.00"),
        ],
    ),
    Provider(
        id="telecel",
        name="Telecel",
        logo="/static/logos/telecel.png",
        color="#E60000",
        bundles=[
            _b("telecel-2gb", "2GB", "30 days", "10.00"),
            _b("telecel-5gb", "5GB", "30 days", "24.00"),
            _b("telecel-10gb", "10GB", "30 days", "46.00"),
        ],
    ),
    Provider(
        id="airteltigo",
        name="AirtelTigo",
        logo="/static/logos/airteltigo.png",
        color="#0066B3",
        bundles=[
            _b("at-1gb", "1GB", "30 days", "5.00"),
            _b("at-3gb", "3GB", "30 days", "14.00"),
            _b("at-6gb", "6GB", "30 days", "26.00"),
        ],
    ),
]
