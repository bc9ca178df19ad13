# Custom runtime types of the DNA chain (assets and dex pallets), in substrate-interface type registry format.
DNA_TYPE_REGISTRY = {
    'types': {
        'Asset': {
            'type': 'struct',
            'type_mapping': [
                ['hash', 'H256'],
                ['symbol', 'Vec<u8>'],
                ['total_supply', 'Balance'],
            ],
        },
        'OrderType': {
            'type': 'enum',
            'value_list': ['Buy', 'Sell'],
        },
        'OrderStatus': {
            'type': 'enum',
            'value_list': ['Pending', 'PartialFilled', 'Filled', 'Canceled'],
        },
        'Price': 'u128',
        'ExchangePair': {
            'type': 'struct',
            'type_mapping': [
                ['hash', 'H256'],
                ['base', 'H256'],
                ['quote', 'H256'],
                ['latest_matched_price', 'Option<Price>'],
            ],
        },
        'LimitOrder': {
            'type': 'struct',
            'type_mapping': [
                ['hash', 'H256'],
                ['base', 'H256'],
                ['quote', 'H256'],
                ['owner', 'AccountId'],
                ['price', 'Price'],
                ['sell_amount', 'Balance'],
                ['buy_amount', 'Balance'],
                ['remained_sell_amount', 'Balance'],
                ['remained_buy_amount', 'Balance'],
                ['otype', 'OrderType'],
                ['status', 'OrderStatus'],
            ],
        },
        'Dex': {
            'type': 'struct',
            'type_mapping': [
                ['hash', 'H256'],
                ['base', 'H256'],
                ['quote', 'H256'],
                ['buyer', 'AccountId'],
                ['seller', 'AccountId'],
                ['maker', 'AccountId'],
                ['taker', 'AccountId'],
                ['otype', 'OrderType'],
                ['price', 'Price'],
                ['base_amount', 'Balance'],
                ['quote_amount', 'Balance'],
            ],
        },
        'OrderLinkedItem': {
            'type': 'struct',
            'type_mapping': [
                ['prev', 'Option<Price>'],
                ['next', 'Option<Price>'],
                ['price', 'Option<Price>'],
                ['orders', 'Vec<H256>'],
            ],
        },
        'DNAi64': 'Option<i64>',
    }
}
