from studio.models import Product, Role, Service, SessionToken, Staff
from studio.services import session_service


class TestSystemCommands:

    def test_seed_roles_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["system", "seed-roles"])
        second = runner.invoke(args=["system", "seed-roles"])
        assert first.exit_code == 0
        assert "PASS Roles ready: admin, seller, therapist" in second.output
        assert db_session.query(Role).count() == 3


class TestStaffCommands:

    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["staff", "create", "--first-name", "Ana", "--role", "therapist", "--role", "seller"])
        assert result.exit_code == 0, result.output

        staff = db_session.query(Staff).filter_by(first_name="Ana").one()
        assert staff.to_dict()["roles"] == ["seller", "therapist"]

        listing = runner.invoke(args=["staff", "list"])
        assert "Ana" in listing.output
        assert "seller, therapist" in listing.output

    def test_issue_and_revoke_token(self, app, db_session, therapist):
        runner = app.test_cli_runner()
        issued = runner.invoke(args=["staff", "issue-token", "--staff-id", str(therapist.id)])
        assert issued.exit_code == 0, issued.output
        token = issued.output.strip().splitlines()[-1]
        assert session_service.validate_session(db_session, token).staff_id == therapist.id

        revoked = runner.invoke(args=["staff", "revoke-token", "--token", token])
        assert revoked.exit_code == 0
        assert session_service.validate_session(db_session, token) is None
        assert db_session.query(SessionToken).filter_by(is_revoked=True).count() == 1

        again = runner.invoke(args=["staff", "revoke-token", "--token", token])
        assert again.exit_code != 0

    def test_issue_token_for_unknown_staff_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["staff", "issue-token", "--staff-id", "9999"])
        assert result.exit_code != 0
        assert "Staff member not found" in result.output


class TestCatalogCommands:

    def test_add_service_and_product(self, app, db_session):
        runner = app.test_cli_runner()
        runner.invoke(args=["catalog", "add-service", "--name", "Massage", "--duration", "60", "--price-cents", "2500"])
        runner.invoke(args=["catalog", "add-product", "--name", "Oil", "--stock", "12", "--stock-minimum", "10"])

        assert db_session.query(Service).filter_by(name="Massage").one().duration_minutes == 60
        assert db_session.query(Product).filter_by(name="Oil").one().stock == 12

    def test_zero_duration_rejected(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["catalog", "add-service", "--name", "X", "--duration", "0"])
        assert result.exit_code != 0
        assert db_session.query(Service).count() == 0
