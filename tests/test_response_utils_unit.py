"""
Unit tests for response_utils module
Tests HTTP response formatting and error handling
"""
import pytest
import json
from unittest.mock import patch
import psycopg
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.response_utils import (
    apply_request_origin,
    create_response,
    create_success_response,
    create_created_response,
    create_error_response,
    create_validation_error_response,
    create_unauthorized_response,
    create_forbidden_response,
    create_not_found_response,
    create_internal_error_response,
    create_service_unavailable_response,
    create_text_response,
    handle_error,
    parse_request_body,
    get_path_parameters,
    get_query_parameters
)
from shared.auth_utils import AuthorizationError
from shared.exercise_validation import InvalidExercise


@pytest.mark.unit
class TestCreateResponse:
    """Test basic response creation"""
    
    def test_create_response_basic(self):
        """Test creating basic response"""
        response = create_response(200, {'message': 'success'})
        
        assert response['statusCode'] == 200
        assert 'headers' in response
        assert 'body' in response
        assert response['headers']['Content-Type'] == 'application/json'
        assert response['headers']['Access-Control-Allow-Origin'] == '*'
    
    def test_create_response_custom_headers(self):
        """Test creating response with custom headers"""
        custom_headers = {'X-Custom-Header': 'value'}
        response = create_response(200, {'data': 'test'}, headers=custom_headers)
        
        assert response['headers']['X-Custom-Header'] == 'value'
        assert response['headers']['Content-Type'] == 'application/json'
    
    def test_create_response_body_serialization(self):
        """Test response body is properly serialized"""
        response = create_response(200, {'key': 'value'})
        body = json.loads(response['body'])
        
        assert body['key'] == 'value'


@pytest.mark.unit
class TestSuccessResponses:
    """Test success response helpers"""
    
    def test_create_success_response(self):
        """Test creating success response"""
        response = create_success_response({'user_id': '123'})
        
        assert response['statusCode'] == 200
        body = json.loads(response['body'])
        assert body['success'] is True
        assert body['data']['user_id'] == '123'
    
    def test_create_success_response_with_message(self):
        """Test success response with message"""
        response = create_success_response({'id': '1'}, message='Created successfully')
        
        body = json.loads(response['body'])
        assert body['message'] == 'Created successfully'
    
    def test_create_created_response(self):
        """Test creating 201 created response"""
        response = create_created_response({'id': 'new-123'})
        
        assert response['statusCode'] == 201
        body = json.loads(response['body'])
        assert body['success'] is True
        assert body['data']['id'] == 'new-123'


@pytest.mark.unit
class TestErrorResponses:
    """Test error response helpers"""
    
    def test_create_error_response_basic(self):
        """Test creating basic error response"""
        response = create_error_response(400, 'Bad request')
        
        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['success'] is False
        assert body['error']['message'] == 'Bad request'
    
    def test_create_error_response_with_code(self):
        """Test error response with error code"""
        response = create_error_response(400, 'Invalid input', error_code='INVALID_INPUT')
        
        body = json.loads(response['body'])
        assert body['error']['code'] == 'INVALID_INPUT'
    
    def test_create_error_response_with_details(self):
        """Test error response with details"""
        details = {'field': 'email', 'issue': 'invalid format'}
        response = create_error_response(400, 'Validation failed', details=details)
        
        body = json.loads(response['body'])
        assert body['error']['details'] == details
    
    def test_create_validation_error_response(self):
        """Test validation error response"""
        errors = {'email': 'Invalid email format', 'password': 'Too short'}
        response = create_validation_error_response(errors)
        
        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['error']['code'] == 'VALIDATION_ERROR'
        assert body['error']['details']['validation_errors'] == errors
    
    def test_create_unauthorized_response(self):
        """Test unauthorized response"""
        response = create_unauthorized_response()
        
        assert response['statusCode'] == 401
        body = json.loads(response['body'])
        assert body['error']['message'] == 'Unauthorized'
        assert body['error']['code'] == 'UNAUTHORIZED'
    
    def test_create_forbidden_response(self):
        """Test forbidden response"""
        response = create_forbidden_response('Access denied')
        
        assert response['statusCode'] == 403
        body = json.loads(response['body'])
        assert body['error']['message'] == 'Access denied'
        assert body['error']['code'] == 'FORBIDDEN'
    
    def test_create_not_found_response(self):
        """Test not found response"""
        response = create_not_found_response('User not found')
        
        assert response['statusCode'] == 404
        body = json.loads(response['body'])
        assert body['error']['message'] == 'User not found'
        assert body['error']['code'] == 'NOT_FOUND'
    
    def test_create_internal_error_response(self):
        """Test internal error response"""
        response = create_internal_error_response()
        
        assert response['statusCode'] == 500
        body = json.loads(response['body'])
        assert body['error']['code'] == 'INTERNAL_ERROR'
    
    def test_create_service_unavailable_response(self):
        """Test retryable service unavailable response"""
        response = create_service_unavailable_response()
        
        assert response['statusCode'] == 503
        body = json.loads(response['body'])
        assert body['error']['details']['retryable'] is True
    
    def test_create_text_response(self):
        """Test plain-text download response"""
        response = create_text_response('REPORT', filename='report.txt')
        
        assert response['statusCode'] == 200
        assert response['body'] == 'REPORT'
        assert response['headers']['Content-Type'] == 'text/plain; charset=utf-8'
        assert response['headers']['Content-Disposition'] == 'attachment; filename="report.txt"'


@pytest.mark.unit
class TestHandleError:
    """Test error handling"""
    
    def test_handle_value_error(self):
        """Test handling bad request errors"""
        response = handle_error(ValueError('Invalid JSON in request body'))
        
        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['error']['code'] == 'BAD_REQUEST'
        assert body['error']['message'] == 'Invalid JSON in request body'
    
    def test_handle_invalid_exercise(self):
        """Test handling exercise validation errors"""
        response = handle_error(InvalidExercise({'title': 'Please enter an exercise title.'}))
        
        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['error']['code'] == 'VALIDATION_ERROR'
        assert body['error']['details']['validation_errors']['title'] == 'Please enter an exercise title.'
    
    def test_handle_authorization_error(self):
        """Test handling forbidden errors"""
        response = handle_error(AuthorizationError('Admin access required'))
        
        assert response['statusCode'] == 403
        body = json.loads(response['body'])
        assert body['error']['message'] == 'Admin access required'
    
    def test_handle_persistence_error(self):
        """Test database failures become a retryable 503"""
        response = handle_error(psycopg.OperationalError('connection refused'))
        
        assert response['statusCode'] == 503
        body = json.loads(response['body'])
        assert body['error']['code'] == 'SERVICE_UNAVAILABLE'
        assert body['error']['details'] == {'retryable': True}
        assert 'connection refused' not in response['body']
    
    def test_handle_generic_error(self):
        """Test handling generic errors"""
        error = Exception('Something went wrong')
        response = handle_error(error)
        
        assert response['statusCode'] == 500
        body = json.loads(response['body'])
        assert body['error']['message'] == 'An unexpected error occurred'


@pytest.mark.unit
class TestRequestParsing:
    """Test request parsing utilities"""
    
    def test_parse_request_body_json_string(self):
        """Test parsing JSON string body"""
        event = {'body': '{"key": "value"}'}
        body = parse_request_body(event)
        
        assert body['key'] == 'value'
    
    def test_parse_request_body_dict(self):
        """Test parsing dict body"""
        event = {'body': {'key': 'value'}}
        body = parse_request_body(event)
        
        assert body['key'] == 'value'
    
    def test_parse_request_body_empty(self):
        """Test parsing empty body"""
        event = {}
        body = parse_request_body(event)
        
        assert body == {}
    
    def test_parse_request_body_invalid_json(self):
        """Test parsing invalid JSON"""
        event = {'body': '{invalid json}'}
        
        with pytest.raises(ValueError, match='Invalid JSON'):
            parse_request_body(event)
    
    def test_get_path_parameters(self):
        """Test getting path parameters"""
        event = {'pathParameters': {'id': '123', 'name': 'test'}}
        params = get_path_parameters(event)
        
        assert params['id'] == '123'
        assert params['name'] == 'test'
    
    def test_get_path_parameters_empty(self):
        """Test getting path parameters when none exist"""
        event = {}
        params = get_path_parameters(event)
        
        assert params == {}
    
    def test_get_query_parameters(self):
        """Test getting query parameters"""
        event = {'queryStringParameters': {'page': '1', 'limit': '10'}}
        params = get_query_parameters(event)
        
        assert params['page'] == '1'
        assert params['limit'] == '10'
    
    def test_get_query_parameters_empty(self):
        """Test getting query parameters when none exist"""
        event = {}
        params = get_query_parameters(event)
        
        assert params == {}

    def test_parse_request_body_not_an_object(self):
        """Test that JSON arrays and scalars are rejected"""
        with pytest.raises(ValueError, match='must be a JSON object'):
            parse_request_body({'body': '["a", "b"]'})


@pytest.mark.unit
class TestRequestOrigin:
    """Test echoing of allowed CORS origins"""

    ORIGINS = {'CORS_ORIGINS': 'https://app.example.com,https://admin.example.com'}

    @patch.dict(os.environ, ORIGINS)
    def test_listed_origin_is_echoed(self):
        response = apply_request_origin(
            create_success_response({}),
            {'headers': {'Origin': 'https://admin.example.com'}}
        )

        assert response['headers']['Access-Control-Allow-Origin'] == 'https://admin.example.com'
        assert response['headers']['Vary'] == 'Origin'

    @patch.dict(os.environ, ORIGINS)
    def test_unlisted_origin_keeps_default(self):
        response = apply_request_origin(
            create_success_response({}),
            {'headers': {'origin': 'https://evil.example.com'}}
        )

        assert response['headers']['Access-Control-Allow-Origin'] == 'https://app.example.com'
        assert 'Vary' not in response['headers']

    @patch.dict(os.environ, {'CORS_ORIGINS': '*'})
    def test_wildcard_is_left_alone(self):
        response = apply_request_origin(
            create_success_response({}),
            {'headers': {'Origin': 'https://app.example.com'}}
        )

        assert response['headers']['Access-Control-Allow-Origin'] == '*'
