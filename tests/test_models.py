"""
Test Data Models
"""

import warnings

from pydantic.warnings import PydanticDeprecatedSince20

from jobboard_authz.data.models import Grant, Principal, Role

from conftest import make_principal


class TestSchemaExamples:

    def test_examples_use_model_config(self):
        for model in (Grant, Principal):
            assert "example" in model.model_config["json_schema_extra"]
            assert model.model_json_schema()["example"]

    def test_schema_generation_has_no_deprecation_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", PydanticDeprecatedSince20)
            Grant.model_json_schema()
            Principal.model_json_schema()


class TestPrincipal:

    def test_is_admin(self):
        assert make_principal(Role.ADMIN).is_admin
        assert not make_principal(Role.SUB_ADMIN).is_admin

    def test_profile(self):
        principal = make_principal(Role.RECRUITER, "frank").model_copy(
            update={"phone_number": "+15557654321"}
        )

        assert principal.profile() == {
            "id": str(principal.id),
            "fullname": "Frank",
            "email": principal.email,
            "role": "recruiter",
            "phoneNumber": "+15557654321",
            "createdAt": principal.created_at.isoformat(),
        }
