"""
API tests for business settings
"""
from app.models import BusinessSettings
from app.services.woocommerce_service import client_from_settings
from app.utils.encryption import decrypt_secret

URL = "/api/v1/business-settings"


def test_no_settings_yet(client, bare_business):
    response = client.get(URL, params={"businessId": str(bare_business.id)})
    assert response.status_code == 200
    assert response.json() == {"data": None}


def test_create_trims_and_encrypts_credentials(client, db, bare_business):
    response = client.post(URL, json={
        "businessId": str(bare_business.id),
        "vatRate": 17,
        "wooUrl": " https://shop.example.com ",
        "consumerKey": " ck_live ",
        "consumerSecret": " cs_live ",
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["vatRate"] == 17
    assert data["wooUrl"] == "https://shop.example.com"
    assert data["consumerKey"] == "ck_live"
    assert data["hasConsumerSecret"] is True
    assert "consumerSecret" not in data
    assert "consumerSecretEncrypted" not in data
    assert data["vatMode"] == "flat"
    assert data["expensesSpreadMode"] == "exact"

    row = db.query(BusinessSettings).filter(BusinessSettings.business_id == bare_business.id).one()
    assert row.consumer_secret_encrypted != "cs_live"
    assert decrypt_secret(row.consumer_secret_encrypted) == "cs_live"
    assert client_from_settings(row).auth == ("ck_live", "cs_live")


def test_partial_update_keeps_other_fields(client, business_id):
    client.post(URL, json={"businessId": business_id, "consumerSecret": "cs_live"})
    data = client.post(URL, json={"businessId": business_id, "materialsRate": 25}).json()["data"]

    assert data["materialsRate"] == 25
    assert data["vatRate"] == 18
    assert data["creditCardRate"] == 2.5
    assert data["hasConsumerSecret"] is True

    fetched = client.get(URL, params={"businessId": business_id}).json()["data"]
    assert fetched["materialsRate"] == 25


def test_blank_secret_clears_it(client, business_id):
    client.post(URL, json={"businessId": business_id, "consumerSecret": "cs_live"})
    data = client.post(URL, json={"businessId": business_id, "consumerSecret": "  "}).json()["data"]
    assert data["hasConsumerSecret"] is False


def test_modes_and_statuses(client, business_id):
    data = client.post(URL, json={
        "businessId": business_id,
        "vatMode": "net",
        "creditFeeMode": "manual",
        "expensesSpreadMode": "spread",
        "validOrderStatuses": ["completed"],
        "shippingCost": 12.5,
        "chargeShippingOnFreeOrders": False,
    }).json()["data"]
    assert data["vatMode"] == "net"
    assert data["creditFeeMode"] == "manual"
    assert data["expensesSpreadMode"] == "spread"
    assert data["validOrderStatuses"] == ["completed"]
    assert data["chargeShippingOnFreeOrders"] is False


def test_invalid_mode(client, business_id):
    response = client.post(URL, json={"businessId": business_id, "vatMode": "gross"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_negative_rate(client, business_id):
    assert client.post(URL, json={"businessId": business_id, "vatRate": -1}).status_code == 400


def test_unknown_business(client, missing_business_id):
    response = client.get(URL, params={"businessId": missing_business_id})
    assert response.status_code == 404
