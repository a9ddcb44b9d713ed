"""
USER ROUTES
===========

Onboarding, user details and search.
"""

from flask import Blueprint, request

from chitfund.routes.helpers import api_response, json_body
from chitfund.services.exceptions import NotFoundError, ValidationError
from chitfund.services.onboarding_service import onboard_user
from chitfund.services.user_service import get_user_details, list_users, search_users

users_bp = Blueprint('users', __name__)


# ============== ONBOARD ==============
@users_bp.route('/onboard', methods=['POST'])
def onboard():
    """Register a member together with their chit"""
    payload = json_body()
    user = onboard_user(
        name=payload.get('name'),
        total_chits=payload.get('total_chits'),
        mobile=payload.get('mobile')
    )
    return api_response(user, "User and chit onboarded successfully", 201)


# ============== USER DETAILS ==============
@users_bp.route('/users/details', methods=['GET'])
def all_details():
    """List all members, newest first"""
    users = list_users()
    return api_response(users, f"Retrieved {len(users)} users")


@users_bp.route('/users/details/<user_id>', methods=['GET'])
def details(user_id):
    """One member with chit payment history and loans"""
    user = get_user_details(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return api_response(user, "User details retrieved successfully")


# ============== SEARCH ==============
@users_bp.route('/users/search', methods=['GET'])
def search():
    """Search members by mobile number or name"""
    query = request.args.get('query', '').strip()
    if not query:
        raise ValidationError("Search query is required")

    users = search_users(query)
    return api_response({
        'users': users,
        'total_results': len(users),
        'search_query': query,
    }, "Users found successfully")
