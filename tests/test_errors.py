"""Tests for the error taxonomy and its serialisation."""

from carrental.core.exceptions import (ApplicationError, CarAlreadyRentedError,
                                       EmailAlreadyTakenError,
                                       EmailNotRegisteredError,
                                       InsufficientAccessError, NotFoundError,
                                       RecordNotFoundError,
                                       UnprocessableEntityError,
                                       WrongPasswordError, to_response_body)


def test_application_error_defaults_to_empty_details():
    err = ApplicationError()
    assert err.details == {}
    assert err.to_json() == {
        "error": {"name": "ApplicationError", "message": err.message, "details": {}}
    }


def test_email_errors_carry_the_email():
    email = "johndoe@mail.com"
    taken = EmailAlreadyTakenError(email)
    unknown = EmailNotRegisteredError(email)
    assert taken.details == {"email": email}
    assert taken.status_code == 422
    assert unknown.details == {"email": email}
    assert unknown.status_code == 404


def test_car_already_rented_carries_the_car():
    car = {"name": "Toyota GT86"}
    err = CarAlreadyRentedError(car)
    assert err.details == {"car": car}
    assert err.status_code == 422
    assert "Toyota GT86" in err.message


def test_status_codes():
    assert WrongPasswordError().status_code == 401
    assert InsufficientAccessError("CUSTOMER").status_code == 401
    assert InsufficientAccessError("CUSTOMER").details == {"role": "CUSTOMER"}
    assert RecordNotFoundError("John").status_code == 404
    assert NotFoundError("GET", "/cars").details == {"method": "GET", "url": "/cars"}


def test_unprocessable_entity_reports_given_name():
    err = UnprocessableEntityError("IntegrityError", "Car could not be saved")
    body = to_response_body(err)
    assert body["error"]["name"] == "IntegrityError"
    assert err.status_code == 422


def test_response_body_for_unexpected_exception_has_null_details():
    body = to_response_body(ValueError("There is an error."))
    assert body == {
        "error": {"name": "ValueError", "message": "There is an error.", "details": None}
    }
