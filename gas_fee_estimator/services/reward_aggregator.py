from gas_fee_estimator.models.gas_models import FeePercentiles, RewardAverages
from gas_fee_estimator.models.node_models import FeeHistory
from gas_fee_estimator.utils.errors import InvalidResponseError

TIERS = ('slow', 'standard', 'fast')


def aggregate_rewards(
    history: FeeHistory,
    percentiles: FeePercentiles,
    node: str = 'unknown',
) -> RewardAverages:
    """
    Average the priority fee reported for each tier percentile over the sampled blocks.

    Reward row values are matched to tiers by the requested percentile,
    i.e. the i-th value of a row belongs to the i-th value of percentiles.as_list().
    Rows holding a zero for any tier are skipped: the node had no transactions
    to sample there, and counting them would drag the average down.
    If no row is valid, zeros are returned.
    """
    if history.reward is None:
        raise InvalidResponseError(node, 'Fee history has no reward field')

    requested = percentiles.as_list()
    sums = dict.fromkeys(TIERS, 0)
    count = 0
    for row in history.reward:
        if len(row) < len(requested):
            raise InvalidResponseError(
                node,
                f'Reward row has {len(row)} values, {len(requested)} percentiles requested',
                row=row,
            )
        by_tier = dict(zip(TIERS, row))
        if any(value == 0 for value in by_tier.values()):
            continue
        for tier, value in by_tier.items():
            sums[tier] += value
        count += 1

    if count > 0:
        sums = {tier: total // count for tier, total in sums.items()}
    return RewardAverages(**sums)
