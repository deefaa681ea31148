# Generic answers used for every component that is not the target of a forced branch.
# Values are positional: composite fields take one entry per part.
DEFAULT_FIELD_DATA = {
    "DatePartsField": ["01", "01", "2000"],
    "TextField": ["Sample text"],
    "MultilineTextField": ["This is sample multiline text for testing purpose."],
    "YesNoField": ["Yes"],
    "NumberField": [8],
    "TelephoneNumberField": ["01234567890"],
    "OsGridRefField": ["SU123456"],
    "EastingNorthingField": ["123456", "654321"],
    "LatLongField": ["51.5074", "-0.1278"],
    "NationalGridFieldNumberField": ["NG1234 5678"],
    "UkAddressField": [
        {
            "addressLine1": "10 Downing Street",
            "addressLine2": "",
            "townOrCity": "London",
            "postcode": "SW1A 2AA",
        }
    ],
    "EmailAddressField": ["test@example.com"],
    "FileUploadField": ["test-file.txt"],
    "DeclarationField": [],
}


def merge_field_data(overrides=None):
    """Default field data with per-type `overrides` applied on top."""
    data = dict(DEFAULT_FIELD_DATA)
    for component_type, values in (overrides or {}).items():
        data[component_type] = values if isinstance(values, list) else [values]
    return data
