class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    CREATED_SUCCESSFULLY = "101"
    UPDATED_SUCCESSFULLY = "102"
    DELETED_SUCCESSFULLY = "103"

    # Validation
    REQUIRED_VALIDATION_ERROR = "200"
    INVALID_INPUT = "201"
    DUPLICATE_ADD_ERROR = "202"
    INVALID_REFERENCE = "203"
    RECORD_NOT_FOUND = "204"
    ALREADY_RECEIVED = "205"

    # Operation
    OPERATION_ERROR = "300"
    OPERATION_FAILED = "301"

    # Authentication
    AUTHENTICATION_TOKEN_INVALID = "400"
    AUTHENTICATION_TOKEN_EXPIRED = "401"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "402"
