"""
Authentication routes - login and current principal
"""
from flask import Blueprint, current_app, jsonify

from utils import validation as v
from utils.errors import ValidationError
from utils.rbac import current_principal, require_authenticated
from utils.tokens import issue_token

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Login endpoint

    Request body:
    {
        "email": "string",
        "password": "string"
    }

    Returns the principal and a bearer token valid for one hour.
    """
    data = v.get_json_payload()
    email = v.text(data, 'email', max_length=120)
    password = data.get('password')
    if not isinstance(password, str) or not password:
        raise ValidationError('password is required')

    principal, token = issue_token(email, password)
    current_app.logger.info('Principal %s (%s) logged in', principal.id, principal.role)

    return jsonify({
        'user': principal.to_dict(),
        'token': token,
    }), 200


@auth_bp.route('/me', methods=['GET'])
@require_authenticated
def me():
    """Principal decoded from the bearer token"""
    return jsonify({'user': current_principal().to_dict()}), 200
