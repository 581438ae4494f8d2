import pytest
from jose import jwt

from clinic.core.exceptions import Unauthorized
from clinic.core.results import Outcome
from clinic.core.security import AccessGate, TokenAuthority, UserRole
from clinic.repositories import UserRepository


class TestTokenAuthority:

    def test_issue_and_validate_patient_token(self, authority, make_patient):
        patient = make_patient()
        token = authority.issue(patient.user_id)

        result = authority.validate(token, UserRole.PATIENT)
        assert result.ok
        assert result.outcome == Outcome.OK
        assert result.subject_id == patient.user_id

    def test_token_carries_no_role(self, authority, make_patient):
        patient = make_patient()
        token = authority.issue(patient.user_id)

        claims = jwt.get_unverified_claims(token)
        assert set(claims) == {"sub", "iat", "exp"}
        assert claims["sub"] == str(patient.user_id)

    def test_role_mismatch(self, authority, make_patient):
        patient = make_patient()
        token = authority.issue(patient.user_id)

        result = authority.validate(token, UserRole.DOCTOR)
        assert not result.ok
        assert result.outcome == Outcome.ROLE_MISMATCH
        assert result.subject_id is None

    def test_expired_token(self, db, make_patient):
        patient = make_patient()
        authority = TokenAuthority(UserRepository(db), expire_minutes=-5)
        token = authority.issue(patient.user_id)

        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.EXPIRED

    @pytest.mark.parametrize("token", ["", None, "not-a-token", "a.b.c"])
    def test_malformed_token(self, authority, token):
        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.MALFORMED

    def test_token_signed_with_other_key_is_malformed(self, db, authority, make_patient):
        patient = make_patient()
        forger = TokenAuthority(UserRepository(db), secret_key="someone-else")
        token = forger.issue(patient.user_id)

        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.MALFORMED

    @pytest.mark.parametrize("claims", [
        {"sub": "alice", "iat": 0},
        {"sub": "²", "iat": 0},
        {"sub": "7", "iat": 1.5},
    ])
    def test_odd_signed_claims_are_malformed(self, authority, claims):
        token = jwt.encode(
            dict(claims, exp=32503680000),
            authority.secret_key,
            algorithm=authority.algorithm,
        )
        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.MALFORMED

    def test_unknown_subject(self, authority):
        token = authority.issue(424242)
        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.UNKNOWN_SUBJECT

    def test_deactivated_subject(self, db, authority, make_patient):
        patient = make_patient()
        token = authority.issue(patient.user_id)
        patient.user.is_active = False
        db.commit()

        assert authority.validate(token, UserRole.PATIENT).outcome == Outcome.UNKNOWN_SUBJECT


class TestAccessGate:

    def test_authorize_returns_subject(self, authority, make_doctor):
        doctor = make_doctor()
        gate = AccessGate(authority)

        assert gate.authorize(authority.issue(doctor.user_id), UserRole.DOCTOR) == doctor.user_id

    def test_authorize_accepts_role_strings(self, authority, make_admin):
        admin = make_admin()
        gate = AccessGate(authority)

        assert gate.authorize(authority.issue(admin.user_id), " Admin ") == admin.user_id

    def test_patient_token_rejected_for_doctor_role(self, authority, make_patient):
        patient = make_patient()
        gate = AccessGate(authority)

        with pytest.raises(Unauthorized) as exc_info:
            gate.authorize(authority.issue(patient.user_id), "doctor")
        assert exc_info.value.status_code == 401

    def test_unknown_role_rejected(self, authority, make_patient):
        patient = make_patient()
        gate = AccessGate(authority)

        with pytest.raises(Unauthorized):
            gate.authorize(authority.issue(patient.user_id), "patinet")

    def test_failures_look_identical(self, db, authority, make_patient):
        patient = make_patient()
        gate = AccessGate(authority)
        expired = TokenAuthority(UserRepository(db), expire_minutes=-1).issue(patient.user_id)

        details = []
        for token, role in [
            (expired, UserRole.PATIENT),
            ("garbage", UserRole.PATIENT),
            (authority.issue(patient.user_id), UserRole.ADMIN),
            (None, UserRole.PATIENT),
        ]:
            with pytest.raises(Unauthorized) as exc_info:
                gate.authorize(token, role)
            details.append((exc_info.value.kind, exc_info.value.detail))

        assert len(set(details)) == 1
        assert details[0] == ("unauthorized", "Invalid or expired token")
