# api/appointments.py - Appointments API Blueprint
from flask import Blueprint, current_app, jsonify, request

from scheduling.errors import NotFound, StoreError, ValidationError
from scheduling.instants import serialize_occurrence
from scheduling.recurrence import recurrence_text
from scheduling.series import (
    create_appointment, delete_appointment, get_appointment, list_appointments, update_appointment,
)
from scheduling.validation import parse_definition, parse_range

appointments_bp = Blueprint('appointments', __name__)

STORE_EXTENSION = 'appointment_store'


def get_store():
    return current_app.extensions[STORE_EXTENSION]


def to_json(occurrence):
    """Wire representation of one occurrence"""
    out = serialize_occurrence(occurrence)
    out['recurrenceText'] = recurrence_text(occurrence)
    return out


def request_payload():
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError('Request body must be valid JSON.')
    return data


@appointments_bp.errorhandler(ValidationError)
def handle_validation_error(error):
    return jsonify({'error': error.message}), 400


@appointments_bp.errorhandler(NotFound)
def handle_not_found(error):
    return jsonify({'error': error.message}), 404


@appointments_bp.errorhandler(StoreError)
def handle_store_error(error):
    current_app.logger.error("Store failure: %s", error.message)
    return jsonify({'error': error.message}), 500


@appointments_bp.route('/appointments', methods=['GET'])
def get_appointments():
    """Get every occurrence overlapping ?from=&to="""
    range_from, range_to = parse_range(request.args.get('from'), request.args.get('to'))
    occurrences = list_appointments(get_store(), range_from, range_to)
    return jsonify([to_json(occurrence) for occurrence in occurrences])


@appointments_bp.route('/appointments/<appointment_id>', methods=['GET'])
def get_appointment_by_id(appointment_id):
    return jsonify(to_json(get_appointment(get_store(), appointment_id)))


@appointments_bp.route('/appointments', methods=['POST'])
def create_appointment_route():
    """Create a standalone appointment or a whole recurring series"""
    definition = parse_definition(request_payload())
    created = create_appointment(get_store(), definition)

    first = to_json(created[0])
    first['occurrenceCount'] = len(created)
    response = jsonify(first)
    response.status_code = 201
    response.headers['Location'] = f"/api/appointments/{first['id']}"
    return response


@appointments_bp.route('/appointments/<appointment_id>', methods=['PUT'])
def update_appointment_route(appointment_id):
    """Update an occurrence and, when recurring, every later member of its series"""
    definition = parse_definition(request_payload())
    updated = update_appointment(get_store(), appointment_id, definition)
    return jsonify(to_json(updated))


@appointments_bp.route('/appointments/<appointment_id>', methods=['DELETE'])
def delete_appointment_route(appointment_id):
    """Delete an occurrence; ?scope=single|following|all widens it to the series"""
    deleted = delete_appointment(get_store(), appointment_id, request.args.get('scope'))
    return jsonify({'message': 'Appointment deleted', 'deleted': deleted}), 200
