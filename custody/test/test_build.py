"""
Build orchestration: critical users and debug data.
"""
from custody.build import build_database, verify_critical_data
from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import ItemProcessState


def test_build_inserts_critical_and_debug_data(app):
    from custody.data.core.item import Item
    from custody.data.core.organization import Company
    from custody.data.core.user_info.user import User

    build_database(enable_debug_data=True, app=app)

    assert verify_critical_data()
    assert User.query.filter_by(username='admin').one().api_token_hash
    assert Company.query.filter_by(name='Demo Works').count() == 1

    states = {item.main_part_name: ItemStateEngine.get_state(item.id) for item in Item.query.all()}
    assert states['SHAFT-40'] == ItemProcessState.IN_QC
    assert states['PUMP-HOUSING-100'] == ItemProcessState.NOT_IN_STOCK

    # A second build finds everything in place
    build_database(enable_debug_data=True, app=app)
    assert Company.query.filter_by(name='Demo Works').count() == 1
    assert User.query.filter_by(username='admin').count() == 1
