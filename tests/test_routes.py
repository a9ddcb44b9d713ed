from chitfund.models import ChitPayment, Loan


def test_unknown_route(client):
    response = client.get('/nowhere')

    assert response.status_code == 404
    assert response.get_json() == {
        'success': False,
        'error': "Route not found",
        'message': "Cannot GET /nowhere",
    }


def test_health_and_root(client):
    health = client.get('/health').get_json()
    assert health['success'] is True
    assert health['message'] == "Service is healthy"
    assert health['data']['status'] == 'ok'
    assert health['data']['environment'] == 'test'
    assert health['data']['version'] == '1.0.0'

    root = client.get('/').get_json()
    assert root['data']['service'] == 'Chit Fund API Server'
    assert root['data']['health'] == '/health'


def test_onboard_then_duplicate(client):
    body = {'name': 'Lakshmi', 'total_chits': 3, 'mobile': 9876543210}

    created = client.post('/onboard', json=body)
    assert created.status_code == 201
    assert created.get_json()['message'] == "User and chit onboarded successfully"

    duplicate = client.post('/onboard', json=body)
    assert duplicate.status_code == 409
    assert duplicate.get_json()['error'] == "Mobile number already exists"
    assert duplicate.get_json()['message'] == "A user with this mobile number already exists"


def test_onboard_validation_envelope(client):
    response = client.post('/onboard', json={'name': 'Lakshmi'})

    assert response.status_code == 400
    assert response.get_json() == {
        'success': False,
        'error': "Validation failed",
        'message': "Name, total_chits, and mobile are required",
    }


def test_weekly_cycle_then_chit_payment(client, make_user, week_counter):
    user, chit = make_user(total_chits=2)

    weekly = client.post('/update/weekly-chits')
    assert weekly.status_code == 200
    assert weekly.get_json()['data']['payments_created'] == 1

    body = {'user_id': user.user_id, 'chit_id': chit.chit_id, 'amount': 50, 'payment_mode': 'cash'}
    partial = client.post('/pay/chit-funds', json=body)
    assert partial.get_json()['message'] == "Partial payment processed successfully."

    body['amount'] = 150
    full = client.post('/pay/chit-funds', json=body)
    assert full.status_code == 200
    assert full.get_json()['message'] == "Payment completed successfully. Chit is now fully paid."
    assert full.get_json()['data']['balance'] == 0

    again = client.post('/pay/chit-funds', json=body)
    assert again.status_code == 404


def test_weekly_cycle_without_counter_is_500(client, make_user):
    make_user()

    response = client.post('/update/weekly-chits')

    assert response.status_code == 500
    assert response.get_json()['success'] is False
    assert ChitPayment.query.count() == 0


def test_chit_payment_missing_fields(client):
    response = client.post('/pay/chit-funds', json={'user_id': 'u1', 'amount': 10})

    assert response.status_code == 400
    assert response.get_json()['error'] == "Validation failed"
    assert "Missing required fields" in response.get_json()['message']


def test_chit_payment_rejects_fractional_amount(client, make_user, make_chit_payment):
    user, chit = make_user()
    make_chit_payment(chit)

    response = client.post('/pay/chit-funds', json={
        'user_id': user.user_id, 'chit_id': chit.chit_id, 'amount': 10.5, 'payment_mode': 'cash'
    })

    assert response.status_code == 400
    assert response.get_json()['error'] == "Amount must be a whole number"


def test_loan_lifecycle(client, make_user):
    user, _ = make_user()

    applied = client.post('/loan/apply', json={
        'user_id': user.user_id, 'interest_rate': '2', 'interest_type': 'monthly',
        'borrowed_amount': 1000
    })
    assert applied.status_code == 201
    loan_id = applied.get_json()['data']['loan_id']

    body = {'user_id': user.user_id, 'loan_id': loan_id, 'amount': 1500, 'payment_mode': 'cash'}
    too_much = client.post('/loan/pay', json=body)
    assert too_much.status_code == 400
    assert "cannot exceed remaining balance" in too_much.get_json()['error']

    body['amount'] = 400
    partial = client.post('/loan/pay', json=body)
    assert partial.get_json()['message'] == "Loan payment processed successfully"

    body['amount'] = 600
    closed = client.post('/loan/pay', json=body)
    assert closed.get_json()['message'] == "Loan fully paid and closed"
    assert Loan.query.filter_by(loan_id=loan_id).one().is_paid is True


def test_deactivation_routes(client, make_user, make_loan):
    user, chit = make_user()
    loan = make_loan(user)

    closed_chit = client.post('/chits/deactive', json={'chit_id': chit.chit_id, 'reason': 'left'})
    assert closed_chit.status_code == 200
    assert closed_chit.get_json()['message'] == "Chit deactivated successfully"
    assert closed_chit.get_json()['data']['reason'] == 'left'

    again = client.post('/chits/deactive', json={'chit_id': chit.chit_id})
    assert again.status_code == 400
    assert again.get_json()['error'] == "Chit is already inactive"

    closed_loan = client.post('/loan/deactive', json={'loan_id': loan.loan_id})
    assert closed_loan.get_json()['data']['is_active'] is False

    missing = client.post('/loan/deactive', json={'loan_id': 'no-such-loan'})
    assert missing.status_code == 404


def test_user_routes(client, make_user):
    user, _ = make_user(name='Ravi Kumar')

    listing = client.get('/users/details').get_json()
    assert [u['user_id'] for u in listing['data']] == [user.user_id]

    details = client.get(f'/users/details/{user.user_id}')
    assert details.status_code == 200
    assert details.get_json()['data']['chit_payment_history'] == []

    missing = client.get('/users/details/nobody')
    assert missing.status_code == 404
    assert missing.get_json()['error'] == "User not found"

    found = client.get('/users/search', query_string={'query': 'ravi'}).get_json()
    assert found['data']['total_results'] == 1
    assert found['data']['search_query'] == 'ravi'

    blank = client.get('/users/search', query_string={'query': '  '})
    assert blank.status_code == 400


def test_reports(client, make_user, make_chit_payment):
    _, chit = make_user(total_chits=3)
    make_chit_payment(chit)

    analytics = client.get('/analytics').get_json()
    assert analytics['data']['count_of_unpaid_chits'] == 1
    assert analytics['data']['amount_pending_to_be_paid_chits'] == 300

    unpaid = client.get('/chits/unpaid').get_json()
    assert unpaid['message'] == "Unpaid chits retrieved successfully"
    assert unpaid['data']['total_unpaid_amount'] == 300
